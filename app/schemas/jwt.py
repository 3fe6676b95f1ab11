"""`JWT` 토큰 페이로드 스키마 정의."""

from pydantic import BaseModel, ConfigDict, Field


class UserTokenPayload(BaseModel):
    """사용자 액세스 토큰 페이로드.

    `sub`는 외부 인증 제공자의 사용자 식별자이며 `users.auth_subject`와 매칭됩니다.
    """

    model_config = ConfigDict(extra="ignore")

    sub: str = Field(..., min_length=1, description="외부 인증 subject")
    email: str = Field(default="", description="사용자 이메일 (없으면 빈 문자열)")
    iat: int | None = Field(None, description="발급 시각(Unix timestamp, seconds)")
    exp: int | None = Field(None, description="만료 시각(Unix timestamp, seconds)")
