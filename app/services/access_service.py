from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.core.logger import get_logger
from app.models.trip import TripMember

logger = get_logger(__name__)

TRIP_NOT_FOUND_MESSAGE = "여행을 찾을 수 없습니다."


def authorize(db: Session, user_id: str, trip_id: str) -> TripMember:
    """(user_id, trip_id) 멤버십을 확인해 반환합니다.

    멤버가 아니면 여행이 존재하지 않을 때와 같은 `NotFoundError`를 던집니다.
    역할(OWNER/EDITOR/VIEWER)에 따른 구분은 하지 않습니다.

    Args:
        db: 데이터베이스 세션.
        user_id: 호출자 사용자 id.
        trip_id: 대상 여행 id.

    Returns:
        호출자의 `TripMember` 행.
    """
    membership = db.scalar(
        select(TripMember).where(TripMember.user_id == user_id, TripMember.trip_id == trip_id)
    )
    if membership is None:
        logger.info("Trip access denied or missing: trip_id=%s", trip_id)
        raise NotFoundError(TRIP_NOT_FOUND_MESSAGE)
    return membership
