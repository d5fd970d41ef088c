from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
import uuid

from sqlalchemy import Column, DateTime, Numeric, String
from sqlalchemy.sql import func
from sqlmodel import Field, SQLModel


class InstallmentPlan(SQLModel, table=True):
    __tablename__ = "installment_plans"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    reservation_id: uuid.UUID = Field(foreign_key="reservations.id", nullable=False, index=True)

    total_amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    number_of_installments: int = Field(nullable=False)
    created_by: str | None = Field(default=None, sa_column=Column(String(64)))

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, server_default=func.now()),
    )
