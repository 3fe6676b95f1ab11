# app/models/itinerary.py
from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, UtcDateTime, new_id, utcnow

if TYPE_CHECKING:
    from app.models.trip import Destination, Trip


class ItineraryType(StrEnum):
    TRAVEL = "TRAVEL"
    STAY = "STAY"
    ACTIVITY = "ACTIVITY"
    FOOD = "FOOD"
    NOTE = "NOTE"


# TripDay 테이블 정의
class TripDay(Base):
    __tablename__ = "trip_days"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    date: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    # floor(date - trip.start_date) + 1, 같은 날짜 중복은 허용
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, default=utcnow)

    trip_id: Mapped[str] = mapped_column(String(36), ForeignKey("trips.id", ondelete="RESTRICT"), nullable=False)
    destination_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("destinations.id", ondelete="SET NULL"), nullable=True
    )

    trip: Mapped[Trip] = relationship(back_populates="days")
    destination: Mapped[Destination | None] = relationship()
    items: Mapped[list[ItineraryItem]] = relationship(
        back_populates="day",
        cascade="all, delete-orphan",
        order_by=lambda: (ItineraryItem.order, ItineraryItem.created_at, ItineraryItem.id),
    )

    __table_args__ = (Index("idx_trip_days_trip_id_day_number", "trip_id", "day_number"),)

    def __repr__(self):
        return f"<TripDay(trip_id={self.trip_id}, day_number={self.day_number})>"


# ItineraryItem 테이블 정의
class ItineraryItem(Base):
    __tablename__ = "itinerary_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    type: Mapped[ItineraryType] = mapped_column(Enum(ItineraryType, name="itinerary_type"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 각각 독립적으로 선택값이며 선후 관계는 검증하지 않음
    start_time: Mapped[datetime | None] = mapped_column(UtcDateTime, nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(UtcDateTime, nullable=True)

    order: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, default=utcnow)

    day_id: Mapped[str] = mapped_column(String(36), ForeignKey("trip_days.id", ondelete="RESTRICT"), nullable=False)

    day: Mapped[TripDay] = relationship(back_populates="items")
    activity_detail: Mapped[ActivityDetail | None] = relationship(
        back_populates="item",
        cascade="all, delete-orphan",
        uselist=False,
    )

    __table_args__ = (Index("idx_itinerary_items_day_id", "day_id"),)

    def __repr__(self):
        return f"<ItineraryItem(type={self.type}, title={self.title})>"


# ActivityDetail 테이블 정의 (ItineraryItem과 선택적 1:1)
class ActivityDetail(Base):
    __tablename__ = "activity_details"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    booking_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    ticket_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)

    item_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("itinerary_items.id", ondelete="RESTRICT"), unique=True, nullable=False
    )

    item: Mapped[ItineraryItem] = relationship(back_populates="activity_detail")

    def __repr__(self):
        return f"<ActivityDetail(item_id={self.item_id})>"


# Trip/Destination은 문자열로 참조되므로 매퍼 설정 전에 등록
from app.models.trip import Destination, Trip  # noqa: E402, F401, F811
