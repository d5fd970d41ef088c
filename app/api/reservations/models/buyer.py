from __future__ import annotations

from datetime import datetime
import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func
from sqlmodel import Field, SQLModel


class Buyer(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    name: str = Field(sa_column=Column(String(150), nullable=False))
    email: str = Field(sa_column=Column(String(255), unique=True, nullable=False))
    role: str = Field(
        default="client", sa_column=Column(String(20), nullable=False, server_default="client")
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime, nullable=False, server_default=func.now())
    )
