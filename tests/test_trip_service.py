"""여행 생성/여행지 추가 서비스 테스트."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.core.errors import ErrorCode, NotFoundError, ValidationError
from app.database import unit_of_work
from app.models.trip import Destination, Trip, TripMember, TripRole
from app.schemas.trip import DestinationCreateRequest, TripCreateRequest
from app.services import trip_service


def _count(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


def _utc_day(day: int) -> datetime:
    return datetime(2024, 7, day, tzinfo=timezone.utc)


def _request(**overrides) -> TripCreateRequest:
    fields = {
        "name": "Summer in Lisbon",
        "start_date": "2024-07-01T00:00:00Z",
        "end_date": "2024-07-15T00:00:00Z",
        "members": [],
    }
    fields.update(overrides)
    return TripCreateRequest(**fields)


def test_create_trip_assigns_owner_and_editors(db, make_user) -> None:
    creator = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")

    result = trip_service.create_trip(db, creator.id, _request(members=[bob.id, carol.id]))

    roles = {member.id: member.role for member in result.members}
    assert roles == {creator.id: TripRole.OWNER, bob.id: TripRole.EDITOR, carol.id: TripRole.EDITOR}
    assert result.currency == "USD"
    assert result.budget is None
    assert _count(db, Trip) == 1
    assert _count(db, TripMember) == 3


def test_create_trip_deduplicates_creator_in_members(db, make_user) -> None:
    creator = make_user("alice")
    bob = make_user("bob")

    result = trip_service.create_trip(db, creator.id, _request(members=[creator.id, bob.id, bob.id]))

    owners = [member for member in result.members if member.role == TripRole.OWNER]
    assert [owner.id for owner in owners] == [creator.id]
    assert len(result.members) == 2
    assert _count(db, TripMember) == 2


def test_create_trip_with_only_creator_in_members(db, make_user) -> None:
    creator = make_user("alice")

    result = trip_service.create_trip(db, creator.id, _request(members=[creator.id]))

    assert [(member.id, member.role) for member in result.members] == [(creator.id, TripRole.OWNER)]


def test_create_trip_returns_member_emails(db, make_user) -> None:
    creator = make_user("alice", email="alice@trips.test")
    bob = make_user("bob", email="bob@trips.test")

    result = trip_service.create_trip(db, creator.id, _request(members=[bob.id]))

    assert {member.email for member in result.members} == {"alice@trips.test", "bob@trips.test"}
    assert all(member.joined_at.tzinfo is not None for member in result.members)


@pytest.mark.parametrize(
    "overrides, missing",
    [
        ({"name": None}, ["name"]),
        ({"name": "   "}, ["name"]),
        ({"start_date": None}, ["startDate"]),
        ({"end_date": None, "members": None}, ["endDate", "members"]),
    ],
)
def test_create_trip_missing_fields(db, make_user, overrides, missing) -> None:
    creator = make_user("alice")

    with pytest.raises(ValidationError) as exc_info:
        trip_service.create_trip(db, creator.id, _request(**overrides))

    assert exc_info.value.code == ErrorCode.MISSING_FIELD
    assert exc_info.value.details == {"fields": missing}
    assert _count(db, Trip) == 0


def test_create_trip_missing_field_checked_before_dates(db, make_user) -> None:
    creator = make_user("alice")

    with pytest.raises(ValidationError) as exc_info:
        trip_service.create_trip(db, creator.id, _request(start_date="not-a-date", members=None))

    assert exc_info.value.code == ErrorCode.MISSING_FIELD


@pytest.mark.parametrize("value", ["not-a-date", "2024-13-01", "07/01/2024"])
def test_create_trip_invalid_date(db, make_user, value) -> None:
    creator = make_user("alice")

    with pytest.raises(ValidationError) as exc_info:
        trip_service.create_trip(db, creator.id, _request(start_date=value))

    assert exc_info.value.code == ErrorCode.INVALID_DATE


@pytest.mark.parametrize(
    "start, end",
    [
        ("2024-07-15T00:00:00Z", "2024-07-01T00:00:00Z"),
        ("2024-07-01T00:00:00Z", "2024-07-01T00:00:00Z"),
        ("2024-07-01T09:00:00+09:00", "2024-07-01T00:00:00Z"),
    ],
)
def test_create_trip_invalid_range_writes_nothing(db, make_user, start, end) -> None:
    creator = make_user("alice")
    bob = make_user("bob")

    with pytest.raises(ValidationError) as exc_info:
        trip_service.create_trip(db, creator.id, _request(start_date=start, end_date=end, members=[bob.id]))

    assert exc_info.value.code == ErrorCode.INVALID_RANGE
    assert _count(db, Trip) == 0
    assert _count(db, TripMember) == 0


def test_create_trip_range_checked_before_members(db, make_user) -> None:
    creator = make_user("alice")

    with pytest.raises(ValidationError) as exc_info:
        trip_service.create_trip(
            db,
            creator.id,
            _request(start_date="2024-07-15", end_date="2024-07-01", members=[]),
        )

    assert exc_info.value.code == ErrorCode.INVALID_RANGE


@pytest.mark.parametrize("members", [[], "bob", [""], [42], {"id": "bob"}])
def test_create_trip_invalid_members(db, make_user, members) -> None:
    creator = make_user("alice")

    with pytest.raises(ValidationError) as exc_info:
        trip_service.create_trip(db, creator.id, _request(members=members))

    assert exc_info.value.code == ErrorCode.INVALID_MEMBERS
    assert _count(db, Trip) == 0


def test_create_trip_unknown_users_are_all_named(db, make_user) -> None:
    creator = make_user("alice")
    bob = make_user("bob")

    with pytest.raises(ValidationError) as exc_info:
        trip_service.create_trip(db, creator.id, _request(members=["ghost-1", bob.id, "ghost-2"]))

    assert exc_info.value.code == ErrorCode.UNKNOWN_USER
    assert exc_info.value.details == {"userIds": ["ghost-1", "ghost-2"]}
    assert _count(db, Trip) == 0
    assert _count(db, TripMember) == 0


def test_create_trip_stores_currency_and_budget(db, make_user) -> None:
    creator = make_user("alice")

    result = trip_service.create_trip(db, creator.id, _request(members=[creator.id], currency="eur", budget="1500.5"))

    assert result.currency == "EUR"
    assert result.budget == Decimal("1500.50")
    assert result.model_dump(mode="json", by_alias=True)["budget"] == "1500.50"


@pytest.mark.parametrize(
    "overrides",
    [
        {"budget": -1},
        {"budget": "abc"},
        {"budget": True},
        {"budget": "NaN"},
        {"currency": "EURO"},
        {"currency": ""},
    ],
)
def test_create_trip_rejects_invalid_currency_or_budget(db, make_user, overrides) -> None:
    creator = make_user("alice")

    with pytest.raises(ValidationError) as exc_info:
        trip_service.create_trip(db, creator.id, _request(members=[creator.id], **overrides))

    assert exc_info.value.code == ErrorCode.INVALID_FIELD
    assert _count(db, Trip) == 0


def test_date_only_values_are_read_as_utc_midnight(db, make_user) -> None:
    creator = make_user("alice")

    result = trip_service.create_trip(
        db, creator.id, _request(start_date="2024-07-01", end_date="2024-07-15", members=[creator.id])
    )

    assert result.model_dump(mode="json", by_alias=True)["startDate"].startswith("2024-07-01T00:00:00")


def test_unit_of_work_rolls_back_trip_when_member_insert_fails(db, make_user) -> None:
    creator = make_user("alice")
    trip = Trip(name="Broken", start_date=_utc_day(1), end_date=_utc_day(5), currency="USD")
    trip.members = [
        TripMember(user_id=creator.id, role=TripRole.OWNER),
        TripMember(user_id=creator.id, role=TripRole.EDITOR),
    ]

    with pytest.raises(IntegrityError):
        with unit_of_work(db):
            db.add(trip)

    assert _count(db, Trip) == 0
    assert _count(db, TripMember) == 0


def test_add_destination_appends_in_order(db, make_user, seed_trip) -> None:
    creator = make_user("alice")
    trip = seed_trip(creator, "Japan", _utc_day(1), _utc_day(10))

    first = trip_service.add_destination(db, creator.id, trip.id, DestinationCreateRequest(name="Tokyo", country="JP"))
    second = trip_service.add_destination(db, creator.id, trip.id, DestinationCreateRequest(name="Kyoto"))
    pinned = trip_service.add_destination(db, creator.id, trip.id, DestinationCreateRequest(name="Osaka", order=7))

    assert (first.order, second.order, pinned.order) == (0, 1, 7)
    assert first.country == "JP"
    assert second.country is None
    assert _count(db, Destination) == 3


def test_add_destination_requires_membership(db, make_user, seed_trip) -> None:
    creator = make_user("alice")
    stranger = make_user("mallory")
    trip = seed_trip(creator, "Japan", _utc_day(1), _utc_day(10))

    with pytest.raises(NotFoundError):
        trip_service.add_destination(db, stranger.id, trip.id, DestinationCreateRequest(name="Tokyo"))

    assert _count(db, Destination) == 0


@pytest.mark.parametrize(
    "request_fields, code",
    [
        ({"name": None}, ErrorCode.MISSING_FIELD),
        ({"name": "Tokyo", "order": "first"}, ErrorCode.INVALID_FIELD),
        ({"name": "Tokyo", "order": 1.5}, ErrorCode.INVALID_FIELD),
        ({"name": 5}, ErrorCode.INVALID_FIELD),
        ({"name": "Tokyo", "country": ["JP"]}, ErrorCode.INVALID_FIELD),
    ],
)
def test_add_destination_validation(db, make_user, seed_trip, request_fields, code) -> None:
    creator = make_user("alice")
    trip = seed_trip(creator, "Japan", _utc_day(1), _utc_day(10))

    with pytest.raises(ValidationError) as exc_info:
        trip_service.add_destination(db, creator.id, trip.id, DestinationCreateRequest(**request_fields))

    assert exc_info.value.code == code

