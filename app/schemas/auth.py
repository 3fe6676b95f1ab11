"""인증 사용자 응답 스키마."""

from app.schemas.trip import CamelModel


class UserResponse(CamelModel):
    id: str
    auth_subject: str
    email: str


class CurrentUserResponse(CamelModel):
    user: UserResponse
