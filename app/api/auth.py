"""인증된 사용자 정보 API."""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user
from app.models.user import User
from app.schemas.auth import CurrentUserResponse, UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserResponse)
def read_current_user(user: User = Depends(get_current_user)) -> CurrentUserResponse:  # noqa: B008
    """토큰으로 식별된 호출자를 반환합니다. 첫 요청이면 이 시점에 생성되어 있습니다."""
    return CurrentUserResponse(user=UserResponse(id=user.id, auth_subject=user.auth_subject, email=user.email))
