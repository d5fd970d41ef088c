from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.installments.schemas import InstallmentItem


class ReservationSummary(BaseModel):
    id: UUID
    status: str
    payment_status: Annotated[str, Field(alias="paymentStatus")]
    total_price: Annotated[Decimal, Field(alias="totalPrice")]
    number_of_passengers: Annotated[int, Field(alias="numberOfPassengers")]
    buyer_name: Annotated[str | None, Field(alias="buyerName")] = None
    buyer_email: Annotated[str | None, Field(alias="buyerEmail")] = None
    payment_link: Annotated[str | None, Field(alias="paymentLink")] = None

    model_config = {"populate_by_name": True}


class TourSummary(BaseModel):
    id: UUID
    title: str
    location: str | None = None


class DepartureSummary(BaseModel):
    id: UUID
    departure_date: Annotated[date, Field(alias="departureDate")]
    return_date: Annotated[date | None, Field(alias="returnDate")] = None

    model_config = {"populate_by_name": True}


class BuyerSummary(BaseModel):
    id: UUID
    name: str
    email: str


class ReconciliationRow(BaseModel):
    installment: InstallmentItem
    reservation: ReservationSummary | None = None
    tour: TourSummary | None = None
    departure: DepartureSummary | None = None
    buyer: BuyerSummary | None = None


class CalendarDayItem(BaseModel):
    due_date: Annotated[date, Field(alias="dueDate")]
    total_amount: Annotated[Decimal, Field(alias="totalAmount")]
    count: int
    rows: list[ReconciliationRow]

    model_config = {"populate_by_name": True}
