from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
import uuid

from sqlalchemy import Column, Date, DateTime, Index, Integer, Numeric, String
from sqlalchemy.sql import func
from sqlmodel import Field, SQLModel


class PaymentInstallment(SQLModel, table=True):
    __tablename__ = "payment_installments"
    __table_args__ = (
        Index("uq_payment_installment_reservation_no", "reservation_id", "installment_no", unique=True),
        Index("idx_payment_installment_due_date", "due_date"),
        Index("idx_payment_installment_status", "status"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    reservation_id: uuid.UUID = Field(foreign_key="reservations.id", nullable=False)
    plan_id: uuid.UUID | None = Field(default=None, foreign_key="installment_plans.id")

    installment_no: int = Field(nullable=False)
    description: str | None = Field(default=None, sa_column=Column(String(200)))
    amount_due: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    due_date: date = Field(sa_column=Column(Date, nullable=False))

    # only "pending" or "paid" are ever stored
    status: str = Field(
        default="pending", sa_column=Column(String(20), nullable=False, server_default="pending")
    )
    payment_method: str | None = Field(default=None, sa_column=Column(String(50)))
    payment_reference: str | None = Field(default=None, sa_column=Column(String(100)))
    paid_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    paid_by: str | None = Field(default=None, sa_column=Column(String(64)))

    version: int = Field(
        default=1, sa_column=Column(Integer, nullable=False, server_default="1")
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, server_default=func.now()),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, server_default=func.now()),
    )
