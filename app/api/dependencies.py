"""API 의존성 모음."""

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import AuthenticationError
from app.database import get_db
from app.models.user import User
from app.services.identity_service import IdentityResolver, JwtIdentityResolver

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_resolver() -> IdentityResolver:
    """요청마다 사용할 `IdentityResolver`를 제공합니다."""
    return JwtIdentityResolver()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
    resolver: IdentityResolver = Depends(get_identity_resolver),  # noqa: B008
) -> User:
    """유효한 `Bearer` 토큰을 요구하고 호출자를 사용자 행으로 변환합니다.

    헤더가 없거나 `Bearer` 형식이 아니면 401, 토큰 검증에 실패해도 401입니다.
    처음 보는 사용자는 이 시점에 생성됩니다.
    """
    if credentials is None:
        raise AuthenticationError("인증 정보가 필요합니다.")
    return resolver.resolve(db, credentials.credentials)


def require_service_secret(
    x_service_secret: str | None = Header(default=None, alias="x-service-secret"),
) -> None:
    """운영 문서 접근용 시크릿 헤더를 검증한다."""
    settings = get_settings()
    if not settings.SERVICE_SECRET:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="서비스 시크릿 설정이 없습니다.",
        )

    if x_service_secret != settings.SERVICE_SECRET:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="유효하지 않은 서비스 시크릿입니다.",
        )
