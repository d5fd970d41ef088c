from __future__ import annotations

from datetime import date
import uuid

from sqlalchemy import Column, Date, ForeignKey, Integer
from sqlmodel import Field, SQLModel


class Departure(SQLModel, table=True):
    __tablename__ = "departures"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    tour_id: uuid.UUID = Field(foreign_key="tours.id", nullable=False)

    departure_date: date = Field(sa_column=Column(Date, nullable=False))
    return_date: date | None = Field(default=None, sa_column=Column(Date))

    total_seats: int = Field(sa_column=Column(Integer, nullable=False))
    reserved_seats: int = Field(
        default=0, sa_column=Column(Integer, nullable=False, server_default="0")
    )
