from __future__ import annotations

from datetime import datetime
from decimal import Decimal
import uuid

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.sql import func
from sqlmodel import Field, SQLModel


class Reservation(SQLModel, table=True):
    __tablename__ = "reservations"
    __table_args__ = (
        Index("idx_reservation_user_id", "user_id"),
        Index("idx_reservation_departure_id", "departure_id"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    tour_id: uuid.UUID = Field(foreign_key="tours.id", nullable=False)
    departure_id: uuid.UUID | None = Field(default=None, foreign_key="departures.id")
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)

    buyer_name: str | None = Field(default=None, sa_column=Column(String(150)))
    buyer_email: str | None = Field(default=None, sa_column=Column(String(255)))
    number_of_passengers: int = Field(
        default=1, sa_column=Column(Integer, nullable=False, server_default="1")
    )

    total_price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    status: str = Field(
        default="pending", sa_column=Column(String(20), nullable=False, server_default="pending")
    )
    payment_status: str = Field(
        default="pending", sa_column=Column(String(20), nullable=False, server_default="pending")
    )
    payment_link: str | None = Field(default=None, sa_column=Column(Text))

    created_at: datetime = Field(
        sa_column=Column(DateTime, nullable=False, server_default=func.now())
    )
