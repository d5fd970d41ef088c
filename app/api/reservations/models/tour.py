from __future__ import annotations

from datetime import datetime
from decimal import Decimal
import uuid

from sqlalchemy import Column, DateTime, Numeric, String
from sqlalchemy.sql import func
from sqlmodel import Field, SQLModel


class Tour(SQLModel, table=True):
    __tablename__ = "tours"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    title: str = Field(sa_column=Column(String(200), nullable=False))
    location: str | None = Field(default=None, sa_column=Column(String(200)))
    price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    created_at: datetime = Field(
        sa_column=Column(DateTime, nullable=False, server_default=func.now())
    )
