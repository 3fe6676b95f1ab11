"""여행 조회 서비스: 멤버 범위 목록 조회와 상세 조회."""

from __future__ import annotations

import math
from datetime import datetime, timezone

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.orm import Session, selectinload

from app.core.logger import get_logger
from app.models.itinerary import ItineraryItem, TripDay
from app.models.trip import Trip, TripMember
from app.schemas.trip import (
    MemberResponse,
    PaginationMeta,
    TripDetailResponse,
    TripListParams,
    TripListResponse,
    TripStatus,
    TripSummary,
)
from app.services.access_service import authorize

logger = get_logger(__name__)


def status_predicates(status: TripStatus | None, now: datetime) -> tuple[ColumnElement[bool], ...]:
    """상태 값을 고정된 날짜 조건 묶음으로 변환합니다.

    - upcoming: start_date > now
    - ongoing: start_date <= now <= end_date
    - past: end_date < now
    - None: 조건 없음
    """
    if status is None:
        return ()
    if status is TripStatus.UPCOMING:
        return (Trip.start_date > now,)
    if status is TripStatus.ONGOING:
        return (Trip.start_date <= now, Trip.end_date >= now)
    if status is TripStatus.PAST:
        return (Trip.end_date < now,)
    raise ValueError(f"Unsupported trip status: {status}")


def derive_status(trip: Trip, now: datetime) -> TripStatus:
    """`status_predicates`와 같은 경계로 단일 여행의 상태를 계산합니다."""
    if trip.start_date > now:
        return TripStatus.UPCOMING
    if trip.end_date < now:
        return TripStatus.PAST
    return TripStatus.ONGOING


def list_trips(
    db: Session,
    user_id: str,
    params: TripListParams,
    now: datetime | None = None,
) -> TripListResponse:
    """호출자가 멤버인 여행을 최신 생성순으로 페이지 단위 조회합니다.

    Args:
        db: 데이터베이스 세션.
        user_id: 호출자 사용자 id.
        params: 보정된 page/limit/status.
        now: 상태 판정 기준 시각. 없으면 현재 UTC 시각.

    Returns:
        여행 목록(호출자 역할 + 전체 멤버 포함)과 페이지 메타데이터.
    """
    reference = now or datetime.now(timezone.utc)
    conditions = (TripMember.user_id == user_id, *status_predicates(params.status, reference))

    total_count = db.scalar(
        select(func.count()).select_from(TripMember).join(TripMember.trip).where(*conditions)
    ) or 0

    rows = db.execute(
        select(Trip, TripMember.role)
        .join(TripMember, TripMember.trip_id == Trip.id)
        .where(*conditions)
        .options(selectinload(Trip.members).selectinload(TripMember.user))
        .order_by(Trip.created_at.desc(), Trip.seq.desc())
        .offset(params.offset)
        .limit(params.limit)
    ).all()

    trips = [
        TripSummary(
            id=trip.id,
            name=trip.name,
            start_date=trip.start_date,
            end_date=trip.end_date,
            role=role,
            status=derive_status(trip, reference),
            members=[MemberResponse.from_model(member) for member in trip.members],
        )
        for trip, role in rows
    ]

    total_pages = math.ceil(total_count / params.limit)
    logger.info(
        "Trips listed: page=%d limit=%d status=%s returned=%d total=%d",
        params.page,
        params.limit,
        params.status,
        len(trips),
        total_count,
    )

    return TripListResponse(
        trips=trips,
        pagination=PaginationMeta(
            page=params.page,
            limit=params.limit,
            total_count=total_count,
            total_pages=total_pages,
            has_next_page=params.page < total_pages,
            has_previous_page=params.page > 1,
        ),
    )


def get_trip(db: Session, user_id: str, trip_id: str) -> TripDetailResponse:
    """멤버십을 확인한 뒤 멤버/여행지/일자/일정 항목을 포함한 여행 상세를 반환합니다.

    Raises:
        NotFoundError: 여행이 없거나 호출자가 멤버가 아닐 때 (두 경우를 구분하지 않음).
    """
    authorize(db, user_id, trip_id)

    trip = db.scalars(
        select(Trip)
        .where(Trip.id == trip_id)
        .options(
            selectinload(Trip.members).selectinload(TripMember.user),
            selectinload(Trip.destinations),
            selectinload(Trip.days).selectinload(TripDay.destination),
            selectinload(Trip.days).selectinload(TripDay.items).selectinload(ItineraryItem.activity_detail),
        )
    ).one()

    return TripDetailResponse.from_model(trip)
