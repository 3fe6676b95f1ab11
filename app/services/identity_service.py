"""Bearer 자격 증명을 영속 사용자 식별자로 바꾸는 Identity Resolver."""

from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError
from app.core.logger import get_logger
from app.models.user import User
from app.services.jwt_service import JwtService

logger = get_logger(__name__)


class IdentityResolver(ABC):
    """자격 증명으로 사용자를 식별하는 인터페이스를 정의합니다."""

    @abstractmethod
    def resolve(self, db: Session, credential: str) -> User:
        """자격 증명을 검증하고 해당 사용자를 반환합니다.

        처음 보는 사용자면 생성합니다. 같은 자격 증명으로 여러 번 호출해도 같은
        사용자를 돌려주므로 매 요청마다 호출해도 안전합니다.

        Raises:
            AuthenticationError: 자격 증명이 유효하지 않을 때.
        """
        raise NotImplementedError


class JwtIdentityResolver(IdentityResolver):
    """`JwtService`로 토큰을 검증하고 `sub` 기준으로 사용자를 upsert합니다."""

    def __init__(self, jwt_service: JwtService | None = None):
        self._jwt_service = jwt_service or JwtService()

    def resolve(self, db: Session, credential: str) -> User:
        try:
            payload = self._jwt_service.verify_user_token(credential)
        except ValueError as exc:
            raise AuthenticationError("유효하지 않은 토큰입니다.") from exc

        return upsert_user(db, auth_subject=payload.sub, email=payload.email)


def upsert_user(db: Session, auth_subject: str, email: str) -> User:
    """`auth_subject`로 사용자를 찾아 이메일을 갱신하거나 새로 만든다.

    동시에 같은 subject로 첫 요청이 들어와 유니크 제약에 걸리면 롤백 후 먼저
    저장된 행을 다시 읽는다.
    """
    user = db.scalar(select(User).where(User.auth_subject == auth_subject))
    if user is not None:
        if user.email != email:
            user.email = email
            db.commit()
        return user

    user = User(auth_subject=auth_subject, email=email)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        user = db.scalar(select(User).where(User.auth_subject == auth_subject))
        if user is None:
            raise
        return user

    logger.info("User created on first sight: user_id=%s", user.id)
    return user
