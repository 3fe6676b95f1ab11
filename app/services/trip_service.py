"""여행 애그리거트 생성 서비스.

여행 + 초기 멤버, 여행지 추가를 각각 하나의 `unit_of_work`로 저장합니다.
검증은 모두 쓰기 전에 끝납니다.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import ErrorCode, ValidationError
from app.core.instants import parse_instant
from app.core.logger import get_logger
from app.core.validators import clean_text, is_integer
from app.database import unit_of_work
from app.models.trip import Destination, Trip, TripMember, TripRole
from app.models.user import User
from app.schemas.trip import DestinationCreateRequest, DestinationResponse, TripCreateRequest, TripResponse
from app.services.access_service import authorize

logger = get_logger(__name__)

_CURRENCY_PATTERN = re.compile(r"[A-Za-z]{3}")
_BUDGET_QUANTUM = Decimal("0.01")
# Numeric(10, 2) 상한
_BUDGET_LIMIT = Decimal("100000000")


def create_trip(db: Session, creator_id: str, request: TripCreateRequest) -> TripResponse:
    """여행과 초기 멤버를 한 트랜잭션으로 생성합니다.

    생성자는 항상 OWNER로, 나머지 멤버는 EDITOR로 추가됩니다. `members`에 생성자
    id가 들어 있어도 멤버 행은 하나만 생깁니다.

    Args:
        db: 데이터베이스 세션.
        creator_id: 요청한 사용자 id.
        request: 여행 생성 요청.

    Returns:
        생성된 여행과 전체 멤버 목록.

    Raises:
        ValidationError: MISSING_FIELD, INVALID_DATE, INVALID_RANGE, INVALID_MEMBERS,
            UNKNOWN_USER, INVALID_FIELD 순서로 먼저 걸린 검증 실패.
    """
    name = clean_text(request.name)
    missing = [
        field
        for field, value in (
            ("name", name),
            ("startDate", request.start_date),
            ("endDate", request.end_date),
            ("members", request.members),
        )
        if value is None
    ]
    if missing:
        raise ValidationError(
            f"필수 항목이 누락되었습니다: {', '.join(missing)}",
            code=ErrorCode.MISSING_FIELD,
            details={"fields": missing},
        )

    try:
        start_date = parse_instant(request.start_date)
        end_date = parse_instant(request.end_date)
    except ValueError as exc:
        raise ValidationError("startDate/endDate는 ISO-8601 형식이어야 합니다.", code=ErrorCode.INVALID_DATE) from exc

    if not start_date < end_date:
        raise ValidationError("startDate는 endDate보다 앞서야 합니다.", code=ErrorCode.INVALID_RANGE)

    member_ids = _union_members(creator_id, request.members)
    _ensure_users_exist(db, member_ids)

    currency = _resolve_currency(request.currency)
    budget = _resolve_budget(request.budget)

    trip = Trip(name=name, start_date=start_date, end_date=end_date, currency=currency, budget=budget)
    trip.members = [
        TripMember(user_id=user_id, role=TripRole.OWNER if user_id == creator_id else TripRole.EDITOR)
        for user_id in member_ids
    ]
    with unit_of_work(db):
        db.add(trip)

    logger.info("Trip created: trip_id=%s members=%d", trip.id, len(member_ids))
    return TripResponse.from_model(trip)


def add_destination(db: Session, user_id: str, trip_id: str, request: DestinationCreateRequest) -> DestinationResponse:
    """여행지에 목적지를 추가합니다. `order`가 없으면 현재 개수를 순서로 씁니다."""
    authorize(db, user_id, trip_id)

    if request.name is not None and not isinstance(request.name, str):
        raise ValidationError("name은 문자열이어야 합니다.", code=ErrorCode.INVALID_FIELD, details={"field": "name"})
    name = clean_text(request.name)
    if name is None:
        raise ValidationError("필수 항목이 누락되었습니다: name", code=ErrorCode.MISSING_FIELD, details={"fields": ["name"]})

    if request.order is None:
        order = db.scalar(select(func.count()).select_from(Destination).where(Destination.trip_id == trip_id)) or 0
    elif is_integer(request.order):
        order = request.order
    else:
        raise ValidationError("order는 정수여야 합니다.", code=ErrorCode.INVALID_FIELD, details={"field": "order"})

    if request.country is not None and not isinstance(request.country, str):
        raise ValidationError("country는 문자열이어야 합니다.", code=ErrorCode.INVALID_FIELD, details={"field": "country"})

    destination = Destination(trip_id=trip_id, name=name, country=clean_text(request.country), order=order)
    with unit_of_work(db):
        db.add(destination)

    logger.info("Destination added: trip_id=%s destination_id=%s", trip_id, destination.id)
    return DestinationResponse.from_model(destination)


def _union_members(creator_id: str, members: object) -> list[str]:
    """멤버 id 목록을 검증하고 생성자를 맨 앞에 합쳐 중복 없이 반환합니다."""
    if not isinstance(members, list) or not members:
        raise ValidationError("members는 비어 있지 않은 사용자 id 목록이어야 합니다.", code=ErrorCode.INVALID_MEMBERS)

    cleaned = [clean_text(member) for member in members]
    if any(member is None for member in cleaned):
        raise ValidationError("members에는 사용자 id 문자열만 올 수 있습니다.", code=ErrorCode.INVALID_MEMBERS)

    return list(dict.fromkeys([creator_id, *cleaned]))


def _ensure_users_exist(db: Session, user_ids: list[str]) -> None:
    found = set(db.scalars(select(User.id).where(User.id.in_(user_ids))))
    unknown = [user_id for user_id in user_ids if user_id not in found]
    if unknown:
        raise ValidationError(
            f"존재하지 않는 사용자입니다: {', '.join(unknown)}",
            code=ErrorCode.UNKNOWN_USER,
            details={"userIds": unknown},
        )


def _resolve_currency(value: str | None) -> str:
    if value is None:
        return get_settings().DEFAULT_CURRENCY

    currency = value.strip()
    if not _CURRENCY_PATTERN.fullmatch(currency):
        raise ValidationError("currency는 3자리 통화 코드여야 합니다.", code=ErrorCode.INVALID_FIELD, details={"field": "currency"})
    return currency.upper()


def _resolve_budget(value: object) -> Decimal | None:
    if value is None:
        return None

    invalid = ValidationError(
        "budget은 0 이상의 숫자여야 합니다.", code=ErrorCode.INVALID_FIELD, details={"field": "budget"}
    )
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise invalid
    try:
        budget = Decimal(str(value).strip())
    except InvalidOperation:
        raise invalid from None

    if not budget.is_finite() or budget < 0 or budget >= _BUDGET_LIMIT:
        raise invalid
    return budget.quantize(_BUDGET_QUANTUM, rounding=ROUND_HALF_UP)
