# app/models/trip.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, UtcDateTime, new_id, utcnow
from app.models.user import User

if TYPE_CHECKING:
    from app.models.itinerary import TripDay


class TripRole(StrEnum):
    OWNER = "OWNER"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"


# Trip 테이블 정의
class Trip(Base):
    __tablename__ = "trips"

    # 삽입 순서 (created_at이 같을 때 최신 삽입 우선 정렬 기준)
    seq: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # 여행 기간 (start_date < end_date)
    start_date: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, index=True)
    end_date: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, index=True)

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    # 저장만 하고 계산은 하지 않음
    budget: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, default=utcnow, index=True)

    members: Mapped[list[TripMember]] = relationship(
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by=lambda: (TripMember.joined_at, TripMember.id),
    )
    destinations: Mapped[list[Destination]] = relationship(
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by=lambda: (Destination.order, Destination.created_at, Destination.id),
    )
    days: Mapped[list[TripDay]] = relationship(
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by=lambda: (TripDay.day_number, TripDay.date, TripDay.created_at, TripDay.id),
    )

    __table_args__ = (
        CheckConstraint("start_date < end_date", name="chk_trips_date_range"),
        CheckConstraint("budget IS NULL OR budget >= 0", name="chk_trips_budget_nonnegative"),
    )

    def __repr__(self):
        return f"<Trip(id={self.id}, name={self.name})>"


# TripMember 테이블 정의 (user, trip) 당 하나
class TripMember(Base):
    __tablename__ = "trip_members"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    role: Mapped[TripRole] = mapped_column(Enum(TripRole, name="trip_role"), nullable=False)
    joined_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, default=utcnow)

    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    trip_id: Mapped[str] = mapped_column(String(36), ForeignKey("trips.id", ondelete="RESTRICT"), nullable=False)

    user: Mapped[User] = relationship()
    trip: Mapped[Trip] = relationship(back_populates="members")

    __table_args__ = (
        UniqueConstraint("user_id", "trip_id", name="uq_trip_members_user_trip"),
        Index("idx_trip_members_trip_id", "trip_id"),
    )

    def __repr__(self):
        return f"<TripMember(user_id={self.user_id}, trip_id={self.trip_id}, role={self.role})>"


# Destination 테이블 정의 (order는 표시 순서 의도일 뿐 유니크 아님)
class Destination(Base):
    __tablename__ = "destinations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, default=utcnow)

    trip_id: Mapped[str] = mapped_column(String(36), ForeignKey("trips.id", ondelete="RESTRICT"), nullable=False)

    trip: Mapped[Trip] = relationship(back_populates="destinations")

    __table_args__ = (Index("idx_destinations_trip_id", "trip_id"),)

    def __repr__(self):
        return f"<Destination(name={self.name}, country={self.country})>"


# TripDay 등 일정 모델은 문자열/람다로 참조되므로 매퍼 설정 전에 등록
from app.models.itinerary import TripDay  # noqa: E402, F811
