"""여행 일자(TripDay)와 일정 항목(ItineraryItem) 생성 서비스."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import ErrorCode, ValidationError
from app.core.instants import days_between, parse_instant
from app.core.logger import get_logger
from app.core.validators import clean_text, is_integer
from app.database import unit_of_work
from app.models.itinerary import ActivityDetail, ItineraryItem, ItineraryType, TripDay
from app.models.trip import Destination
from app.schemas.trip import TripDayCreateRequest, TripDayResponse
from app.services.access_service import authorize

logger = get_logger(__name__)

_ACTIVITY_DETAIL_FIELDS = {"location": "location", "bookingUrl": "booking_url", "ticketRef": "ticket_ref"}


@dataclass(frozen=True, slots=True)
class _ItemDraft:
    """검증을 통과한 일정 항목 값."""

    type: ItineraryType
    title: str
    description: str | None
    order: int
    start_time: datetime | None
    end_time: datetime | None
    activity_detail: dict[str, str | None] | None


def compute_day_number(trip_start: datetime, date: datetime) -> int:
    """여행 시작일 기준 1부터 시작하는 일차를 계산합니다 (UTC 달력 날짜 차이 + 1)."""
    return days_between(trip_start, date) + 1


def create_day(db: Session, user_id: str, trip_id: str, request: TripDayCreateRequest) -> TripDayResponse:
    """일자와 일정 항목을 한 트랜잭션으로 생성합니다.

    검증 순서는 멤버십 → 필수 항목 → 날짜 형식 → 여행 기간(UTC 달력 날짜 기준) → 항목(type/title/order)
    → 항목 시각 형식 → 여행지 소속입니다. 항목의 startTime/endTime 선후 관계는
    검증하지 않습니다. 같은 날짜로 여러 번 호출하면 일자가 각각 생성됩니다.

    Args:
        db: 데이터베이스 세션.
        user_id: 호출자 사용자 id.
        trip_id: 대상 여행 id.
        request: 일자 생성 요청.

    Returns:
        생성된 일자. 항목은 `order` 오름차순입니다.
    """
    trip = authorize(db, user_id, trip_id).trip

    missing = [
        field
        for field, value in (("date", request.date), ("itineraryItems", request.itinerary_items))
        if value is None
    ]
    if missing:
        raise ValidationError(
            f"필수 항목이 누락되었습니다: {', '.join(missing)}",
            code=ErrorCode.MISSING_FIELD,
            details={"fields": missing},
        )

    try:
        date = parse_instant(request.date)
    except ValueError as exc:
        raise ValidationError("date는 ISO-8601 형식이어야 합니다.", code=ErrorCode.INVALID_DATE) from exc

    if not 0 <= days_between(trip.start_date, date) <= days_between(trip.start_date, trip.end_date):
        raise ValidationError(
            "date가 여행 기간을 벗어났습니다.",
            code=ErrorCode.OUT_OF_RANGE,
            details={"startDate": trip.start_date.isoformat(), "endDate": trip.end_date.isoformat()},
        )

    raw_items = request.itinerary_items
    if not isinstance(raw_items, list):
        raise ValidationError(
            "itineraryItems는 배열이어야 합니다.",
            code=ErrorCode.INVALID_FIELD,
            details={"field": "itineraryItems"},
        )
    for index, raw in enumerate(raw_items):
        _check_item_shape(index, raw)
    drafts = [_build_draft(index, raw) for index, raw in enumerate(raw_items)]

    destination = _resolve_destination(db, trip_id, request.destination_id)

    day = TripDay(
        trip_id=trip_id,
        date=date,
        day_number=compute_day_number(trip.start_date, date),
        destination=destination,
    )
    day.items = [_to_item(draft) for draft in drafts]
    with unit_of_work(db):
        db.add(day)

    logger.info(
        "Trip day created: trip_id=%s day_id=%s day_number=%d items=%d",
        trip_id,
        day.id,
        day.day_number,
        len(drafts),
    )
    return TripDayResponse.from_model(day)


def _invalid_item(index: int, message: str) -> ValidationError:
    return ValidationError(
        f"itineraryItems[{index}]: {message}",
        code=ErrorCode.INVALID_ITEM,
        details={"index": index},
    )


def _check_item_shape(index: int, raw: Any) -> None:
    """type/title/order 필수 조건과 activityDetail 형태를 확인합니다."""
    if not isinstance(raw, dict):
        raise _invalid_item(index, "항목은 객체여야 합니다.")

    item_type = raw.get("type")
    if not isinstance(item_type, str) or item_type not in ItineraryType.__members__:
        allowed = ", ".join(ItineraryType)
        raise _invalid_item(index, f"type은 {allowed} 중 하나여야 합니다.")
    if clean_text(raw.get("title")) is None:
        raise _invalid_item(index, "title은 비어 있을 수 없습니다.")
    if not is_integer(raw.get("order")):
        raise _invalid_item(index, "order는 정수여야 합니다.")

    description = raw.get("description")
    if description is not None and not isinstance(description, str):
        raise _invalid_item(index, "description은 문자열이어야 합니다.")

    detail = raw.get("activityDetail")
    if detail is None:
        return
    if not isinstance(detail, dict):
        raise _invalid_item(index, "activityDetail은 객체여야 합니다.")
    for key in _ACTIVITY_DETAIL_FIELDS:
        value = detail.get(key)
        if value is not None and not isinstance(value, str):
            raise _invalid_item(index, f"activityDetail.{key}는 문자열이어야 합니다.")


def _parse_optional_time(index: int, raw: dict[str, Any], key: str) -> datetime | None:
    value = raw.get(key)
    if value is None:
        return None
    try:
        return parse_instant(value)
    except ValueError as exc:
        raise ValidationError(
            f"itineraryItems[{index}].{key}는 ISO-8601 형식이어야 합니다.",
            code=ErrorCode.INVALID_DATE,
            details={"index": index, "field": key},
        ) from exc


def _build_draft(index: int, raw: dict[str, Any]) -> _ItemDraft:
    detail = raw.get("activityDetail")
    return _ItemDraft(
        type=ItineraryType(raw["type"]),
        title=raw["title"].strip(),
        description=raw.get("description"),
        order=raw["order"],
        start_time=_parse_optional_time(index, raw, "startTime"),
        end_time=_parse_optional_time(index, raw, "endTime"),
        activity_detail=(
            {column: detail.get(key) for key, column in _ACTIVITY_DETAIL_FIELDS.items()} if detail is not None else None
        ),
    )


def _resolve_destination(db: Session, trip_id: str, destination_id: object) -> Destination | None:
    if destination_id is None:
        return None

    destination = None
    if isinstance(destination_id, str):
        destination = db.scalar(
            select(Destination).where(Destination.id == destination_id, Destination.trip_id == trip_id)
        )
    if destination is None:
        raise ValidationError(
            "destinationId가 이 여행의 여행지가 아닙니다.",
            code=ErrorCode.INVALID_FIELD,
            details={"field": "destinationId"},
        )
    return destination


def _to_item(draft: _ItemDraft) -> ItineraryItem:
    item = ItineraryItem(
        type=draft.type,
        title=draft.title,
        description=draft.description,
        start_time=draft.start_time,
        end_time=draft.end_time,
        order=draft.order,
    )
    if draft.activity_detail is not None:
        item.activity_detail = ActivityDetail(**draft.activity_detail)
    return item
