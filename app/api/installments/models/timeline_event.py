from __future__ import annotations

from datetime import datetime, timezone
import uuid

from sqlalchemy import JSON, Column, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from sqlmodel import Field, SQLModel


class ReservationTimelineEvent(SQLModel, table=True):
    __tablename__ = "reservation_timeline_events"
    __table_args__ = (
        Index("idx_timeline_reservation_id", "reservation_id"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    reservation_id: uuid.UUID = Field(foreign_key="reservations.id", nullable=False)
    event_type: str = Field(sa_column=Column(String(50), nullable=False))
    description: str = Field(sa_column=Column(Text, nullable=False))
    performed_by: str | None = Field(default=None, sa_column=Column(String(64)))
    event_metadata: dict | None = Field(
        default=None,
        sa_column=Column("metadata", JSON().with_variant(JSONB(), "postgresql")),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, server_default=func.now()),
    )
