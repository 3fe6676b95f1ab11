"""여행(Trip) 요청/응답 스키마.

요청 모델은 필드 누락이나 형식 오류를 직접 판정하지 않습니다. 서비스 계층이
정해진 순서(누락 → 날짜 → 범위 → ...)로 검증해야 하므로 값은 느슨하게 받습니다.
응답은 camelCase 키로 직렬화됩니다.
"""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from app.models.itinerary import ActivityDetail, ItineraryItem, ItineraryType, TripDay
from app.models.trip import Destination, Trip, TripMember, TripRole

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class CamelModel(BaseModel):
    """camelCase 별칭을 쓰는 공통 기반 모델."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TripStatus(StrEnum):
    """현재 시각 기준으로 파생되는 여행 상태. 저장하지 않습니다."""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    PAST = "past"


# ─────────────────────────── 요청 ───────────────────────────


class TripListParams(BaseModel):
    """여행 목록 조회 쿼리 파라미터.

    page는 1 이상, limit은 1~100으로 보정합니다. 숫자가 아니면 기본값을 씁니다.
    """

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    status: TripStatus | None = None

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else DEFAULT_PAGE
        except (TypeError, ValueError):
            numeric = DEFAULT_PAGE
        return max(1, numeric)

    @field_validator("limit", mode="before")
    @classmethod
    def _clamp_limit(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else DEFAULT_LIMIT
        except (TypeError, ValueError):
            numeric = DEFAULT_LIMIT
        return min(MAX_LIMIT, max(1, numeric))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class TripCreateRequest(CamelModel):
    """여행 생성 요청 모델.

    Fields:
        `name`: 여행 이름
        `startDate` / `endDate`: ISO-8601 시각 (날짜만 오면 UTC 자정)
        `members`: 함께할 사용자 id 목록 (생성자는 자동 포함)
        `currency`: 통화 코드, 기본값은 설정의 `DEFAULT_CURRENCY`
        `budget`: 0 이상 소수, 소수점 2자리로 저장
    """

    name: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    members: Any = None
    currency: str | None = None
    budget: Any = None


class DestinationCreateRequest(CamelModel):
    """여행지 추가 요청 모델. `order`가 없으면 맨 뒤에 붙습니다."""

    name: Any = None
    country: Any = None
    order: Any = None


class TripDayCreateRequest(CamelModel):
    """일자 + 일정 항목 생성 요청 모델.

    값의 타입 검증은 멤버십 확인 뒤 서비스에서 하므로 모두 `Any`로 받습니다.
    """

    date: Any = None
    itinerary_items: Any = None
    destination_id: Any = None


# ─────────────────────────── 응답 ───────────────────────────


class MemberResponse(CamelModel):
    id: str = Field(..., description="사용자 id")
    email: str
    role: TripRole
    joined_at: datetime

    @classmethod
    def from_model(cls, member: TripMember) -> "MemberResponse":
        return cls(id=member.user_id, email=member.user.email, role=member.role, joined_at=member.joined_at)


class TripSummary(CamelModel):
    id: str
    name: str
    start_date: datetime
    end_date: datetime
    role: TripRole = Field(..., description="호출자의 역할")
    status: TripStatus = Field(..., description="조회 시각 기준 파생 상태")
    members: list[MemberResponse]


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class TripListResponse(CamelModel):
    trips: list[TripSummary]
    pagination: PaginationMeta


class TripResponse(CamelModel):
    id: str
    name: str
    start_date: datetime
    end_date: datetime
    currency: str
    budget: Decimal | None = None
    created_at: datetime
    members: list[MemberResponse]

    @field_serializer("budget")
    def _serialize_budget(self, value: Decimal | None) -> str | None:
        return None if value is None else f"{value:.2f}"

    @classmethod
    def from_model(cls, trip: Trip) -> "TripResponse":
        return cls(**_trip_fields(trip))


class DestinationSummary(CamelModel):
    id: str
    name: str
    country: str | None = None


class DestinationResponse(DestinationSummary):
    order: int
    created_at: datetime

    @classmethod
    def from_model(cls, destination: Destination) -> "DestinationResponse":
        return cls(
            id=destination.id,
            name=destination.name,
            country=destination.country,
            order=destination.order,
            created_at=destination.created_at,
        )


class ActivityDetailResponse(CamelModel):
    id: str
    location: str | None = None
    booking_url: str | None = None
    ticket_ref: str | None = None

    @classmethod
    def from_model(cls, detail: ActivityDetail) -> "ActivityDetailResponse":
        return cls(id=detail.id, location=detail.location, booking_url=detail.booking_url, ticket_ref=detail.ticket_ref)


class ItineraryItemResponse(CamelModel):
    id: str
    type: ItineraryType
    title: str
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    order: int
    created_at: datetime
    activity_detail: ActivityDetailResponse | None = None

    @classmethod
    def from_model(cls, item: ItineraryItem) -> "ItineraryItemResponse":
        detail = item.activity_detail
        return cls(
            id=item.id,
            type=item.type,
            title=item.title,
            description=item.description,
            start_time=item.start_time,
            end_time=item.end_time,
            order=item.order,
            created_at=item.created_at,
            activity_detail=ActivityDetailResponse.from_model(detail) if detail is not None else None,
        )


class TripDayResponse(CamelModel):
    id: str
    date: datetime
    day_number: int
    created_at: datetime
    destination: DestinationSummary | None = None
    items: list[ItineraryItemResponse]

    @classmethod
    def from_model(cls, day: TripDay) -> "TripDayResponse":
        destination = day.destination
        return cls(
            id=day.id,
            date=day.date,
            day_number=day.day_number,
            created_at=day.created_at,
            destination=(
                DestinationSummary(id=destination.id, name=destination.name, country=destination.country)
                if destination is not None
                else None
            ),
            items=[ItineraryItemResponse.from_model(item) for item in day.items],
        )


class TripDetailResponse(TripResponse):
    destinations: list[DestinationResponse]
    days: list[TripDayResponse]

    @classmethod
    def from_model(cls, trip: Trip) -> "TripDetailResponse":
        return cls(
            **_trip_fields(trip),
            destinations=[DestinationResponse.from_model(destination) for destination in trip.destinations],
            days=[TripDayResponse.from_model(day) for day in trip.days],
        )


def _trip_fields(trip: Trip) -> dict[str, Any]:
    return {
        "id": trip.id,
        "name": trip.name,
        "start_date": trip.start_date,
        "end_date": trip.end_date,
        "currency": trip.currency,
        "budget": trip.budget,
        "created_at": trip.created_at,
        "members": [MemberResponse.from_model(member) for member in trip.members],
    }
