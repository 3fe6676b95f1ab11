"""JWT 발급 및 검증을 담당하는 서비스 모듈."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from pydantic import ValidationError as PydanticValidationError

from app.core.config import get_settings
from app.schemas.jwt import UserTokenPayload


class JwtService:
    """사용자 액세스 토큰 서명/검증 유틸리티."""

    algorithm = "HS256"

    def __init__(self, secret: Optional[str] = None, expiry_minutes: Optional[int] = None):
        """환경 설정을 불러와 서명 시크릿과 만료 시간을 초기화한다."""
        settings = get_settings()
        self.secret = secret if secret is not None else settings.JWT_ACCESS_SECRET
        self.expires_delta = timedelta(
            minutes=expiry_minutes if expiry_minutes is not None else settings.JWT_ACCESS_EXPIRY_MINUTES
        )

        if not self.secret:
            raise ValueError("JWT access secret is not set.")

    def sign_user_token(self, subject: str, email: str = "", expires_in: Optional[timedelta] = None) -> str:
        """외부 인증 subject와 이메일을 담은 액세스 토큰을 생성한다."""
        now = datetime.now(timezone.utc)
        expire = now + (expires_in if expires_in is not None else self.expires_delta)
        payload: dict[str, Any] = {
            "sub": subject,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify_user_token(self, token: str) -> UserTokenPayload:
        """사용자 토큰의 서명/만료를 검증하고 페이로드를 반환한다.

        Raises:
            ValueError: 서명 오류, 만료, 필수 필드(`sub`) 누락 시.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.PyJWTError:
            raise ValueError("Invalid token") from None

        try:
            return UserTokenPayload.model_validate(payload)
        except PydanticValidationError:
            raise ValueError("Invalid user token payload.") from None
