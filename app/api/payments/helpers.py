from __future__ import annotations

from datetime import datetime

from app.api.installments.helpers import to_installment_item
from app.api.installments.service import CalendarDay, ReconciliationRecord
from app.api.payments.schemas import (
    BuyerSummary,
    CalendarDayItem,
    DepartureSummary,
    ReconciliationRow,
    ReservationSummary,
    TourSummary,
)


def to_reconciliation_row(record: ReconciliationRecord, now: datetime) -> ReconciliationRow:
    reservation, tour, departure, buyer = (
        record.reservation,
        record.tour,
        record.departure,
        record.buyer,
    )
    return ReconciliationRow(
        installment=to_installment_item(record.installment, now),
        reservation=ReservationSummary(
            id=reservation.id,
            status=reservation.status,
            paymentStatus=reservation.payment_status,
            totalPrice=reservation.total_price,
            numberOfPassengers=reservation.number_of_passengers,
            buyerName=reservation.buyer_name,
            buyerEmail=reservation.buyer_email,
            paymentLink=reservation.payment_link,
        )
        if reservation
        else None,
        tour=TourSummary(id=tour.id, title=tour.title, location=tour.location) if tour else None,
        departure=DepartureSummary(
            id=departure.id,
            departureDate=departure.departure_date,
            returnDate=departure.return_date,
        )
        if departure
        else None,
        buyer=BuyerSummary(id=buyer.id, name=buyer.name, email=buyer.email) if buyer else None,
    )


def to_calendar_day(day: CalendarDay, now: datetime) -> CalendarDayItem:
    return CalendarDayItem(
        dueDate=day.due_date,
        totalAmount=day.total_amount,
        count=len(day.records),
        rows=[to_reconciliation_row(record, now) for record in day.records],
    )
