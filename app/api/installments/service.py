from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from itertools import groupby
from typing import NamedTuple
import uuid

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.installments.models import (
    InstallmentPlan,
    PaymentInstallment,
    ReservationTimelineEvent,
)
from app.api.reservations.models import Buyer, Departure, Reservation, Tour
from app.core.common.constants import (
    BulkPayOutcome,
    InstallmentStatus,
    ReservationPaymentStatus,
    ReservationStatus,
    TimelineEventType,
)
from app.core.config import Config
from app.core.exceptions import (
    InstallmentAlreadyPaid,
    InstallmentNotFound,
    InvalidStateError,
    PersistenceError,
    ReservationNotFound,
    ValidationException,
    VersionConflict,
)
from app.core.messages import ErrorMessage
from app.core.middlewares import logger
from app.utils.money import money
from app.utils.event_publisher import (
    NotificationError,
    publish_installment_paid_event,
    publish_installment_plan_created_event,
)


class ScheduleEntry(NamedTuple):
    amount_due: Decimal
    due_date: date | None
    description: str | None = None


class ReconciliationRecord(NamedTuple):
    installment: PaymentInstallment
    reservation: Reservation | None
    tour: Tour | None
    departure: Departure | None
    buyer: Buyer | None
    effective_status: InstallmentStatus


@dataclass
class CalendarDay:
    due_date: date
    total_amount: Decimal
    records: list[ReconciliationRecord]


@dataclass
class BulkPayResult:
    installment_id: uuid.UUID
    outcome: BulkPayOutcome
    error_code: str | None = None
    message: str | None = None
    installment: PaymentInstallment | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def derive_effective_status(
    installment: PaymentInstallment, now: datetime | date
) -> InstallmentStatus:
    """Return ``overdue`` for a pending installment whose due date has passed.

    Pure read-time derivation: the stored status is never changed here, so
    the same record reads as pending before its due date and overdue after.
    """
    today = now.date() if isinstance(now, datetime) else now
    status = InstallmentStatus(installment.status)
    if status == InstallmentStatus.PENDING and installment.due_date < today:
        return InstallmentStatus.OVERDUE
    return status


def build_default_schedule(
    total_amount: Decimal,
    first_due_date: date,
    number_of_installments: int | None = None,
    deposit_percentage: Decimal | None = None,
    interval_days: int | None = None,
) -> list[ScheduleEntry]:
    """Deposit due on ``first_due_date`` followed by equal installments.

    The last installment takes the rounding remainder so the schedule sums
    exactly to ``total_amount``.
    """
    if number_of_installments is None:
        number_of_installments = Config.DEFAULT_NUMBER_OF_INSTALLMENTS
    if deposit_percentage is None:
        deposit_percentage = Config.MIN_DEPOSIT_PERCENTAGE
    if interval_days is None:
        interval_days = Config.INSTALLMENT_INTERVAL_DAYS

    total_amount = money(total_amount)
    if total_amount <= 0:
        raise ValidationException(ErrorMessage.INVALID_TOTAL_AMOUNT)
    if number_of_installments < 1:
        raise ValidationException(ErrorMessage.INVALID_NUMBER_OF_INSTALLMENTS)
    if not Decimal("0") <= Decimal(deposit_percentage) < Decimal("100"):
        raise ValidationException(ErrorMessage.INVALID_DEPOSIT_PERCENTAGE)

    deposit_amount = (total_amount * Decimal(deposit_percentage) / Decimal("100")).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
    remaining_amount = total_amount - deposit_amount
    share = (remaining_amount / number_of_installments).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
    last_share = remaining_amount - share * (number_of_installments - 1)
    if share <= 0 or last_share <= 0:
        raise ValidationException(ErrorMessage.INSTALLMENT_SHARE_TOO_SMALL)

    schedule: list[ScheduleEntry] = []
    if deposit_amount > 0:
        schedule.append(ScheduleEntry(deposit_amount, first_due_date, "Initial deposit"))

    for i in range(1, number_of_installments + 1):
        amount = last_share if i == number_of_installments else share
        schedule.append(
            ScheduleEntry(
                amount,
                first_due_date + timedelta(days=i * interval_days),
                f"Installment {i} of {number_of_installments}",
            )
        )
    return schedule


async def get_reservation(db: AsyncSession, reservation_id: uuid.UUID) -> Reservation:
    reservation = await db.get(Reservation, reservation_id)
    if not reservation:
        raise ReservationNotFound()
    return reservation


async def _installments_of(
    db: AsyncSession, reservation_id: uuid.UUID
) -> list[PaymentInstallment]:
    stmt = (
        select(PaymentInstallment)
        .where(PaymentInstallment.reservation_id == reservation_id)
        .order_by(PaymentInstallment.installment_no)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


def _paid_total(installments: list[PaymentInstallment]) -> Decimal:
    return sum(
        (
            money(item.amount_due)
            for item in installments
            if item.status == InstallmentStatus.PAID.value
        ),
        Decimal("0.00"),
    )


async def outstanding_amount(
    db: AsyncSession, reservation_id: uuid.UUID, total_amount: Decimal
) -> Decimal:
    """What a new plan for ``total_amount`` still has to cover."""
    existing = await _installments_of(db, reservation_id)
    outstanding = money(total_amount) - _paid_total(existing)
    if outstanding <= 0:
        raise ValidationException(ErrorMessage.NOTHING_LEFT_TO_SCHEDULE)
    return outstanding


async def create_installment_plan(
    db: AsyncSession,
    reservation_id: uuid.UUID,
    total_amount: Decimal,
    schedule: list[ScheduleEntry],
    created_by: str | None = None,
) -> tuple[InstallmentPlan, list[PaymentInstallment]]:
    if not schedule:
        raise ValidationException(ErrorMessage.EMPTY_SCHEDULE)

    total_amount = money(total_amount)
    if total_amount <= 0:
        raise ValidationException(ErrorMessage.INVALID_TOTAL_AMOUNT)

    entries = [
        ScheduleEntry(money(item.amount_due), item.due_date, item.description)
        for item in schedule
    ]
    if any(item.amount_due <= 0 for item in entries):
        raise ValidationException(ErrorMessage.INVALID_INSTALLMENT_AMOUNT)
    if any(item.due_date is None for item in entries):
        raise ValidationException(ErrorMessage.MISSING_DUE_DATE)

    reservation = await get_reservation(db, reservation_id)
    if reservation.status == ReservationStatus.CANCELLED.value:
        raise InvalidStateError(ErrorMessage.RESERVATION_CANCELLED)

    existing = await _installments_of(db, reservation_id)
    if any(item.status != InstallmentStatus.PAID.value for item in existing):
        raise InvalidStateError(ErrorMessage.ACTIVE_PLAN_EXISTS)

    already_paid = _paid_total(existing)
    outstanding = total_amount - already_paid
    if outstanding <= 0:
        raise ValidationException(ErrorMessage.NOTHING_LEFT_TO_SCHEDULE)

    scheduled = sum((item.amount_due for item in entries), Decimal("0.00"))
    if abs(scheduled - outstanding) > Config.AMOUNT_TOLERANCE:
        raise ValidationException(
            f"Schedule totals {scheduled} but {outstanding} is outstanding"
        )

    next_no = max((item.installment_no for item in existing), default=0) + 1

    plan = InstallmentPlan(
        id=uuid.uuid4(),
        reservation_id=reservation_id,
        total_amount=total_amount,
        number_of_installments=len(entries),
        created_by=created_by,
    )
    installments = [
        PaymentInstallment(
            id=uuid.uuid4(),
            reservation_id=reservation_id,
            plan_id=plan.id,
            installment_no=next_no + offset,
            description=item.description,
            amount_due=item.amount_due,
            due_date=item.due_date,
            status=InstallmentStatus.PENDING.value,
        )
        for offset, item in enumerate(entries)
    ]
    event = ReservationTimelineEvent(
        reservation_id=reservation_id,
        event_type=TimelineEventType.INSTALLMENT_PLAN_CREATED.value,
        description=f"Payment plan created: {len(entries)} installments totalling {scheduled}",
        performed_by=created_by,
        event_metadata={
            "planId": str(plan.id),
            "totalAmount": str(total_amount),
            "alreadyPaid": str(already_paid),
            "installments": [
                {"amountDue": str(item.amount_due), "dueDate": item.due_date.isoformat()}
                for item in entries
            ],
        },
    )

    try:
        db.add(plan)
        await db.flush()
        db.add_all(installments)
        db.add(event)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError() from exc

    logger.info(
        f"Installment plan {plan.id} created for reservation {reservation_id}: "
        f"{len(installments)} installments, {scheduled}"
    )
    await _notify(
        publish_installment_plan_created_event,
        {
            "event": "installment_plan.created",
            "plan_id": str(plan.id),
            "reservation_id": str(reservation_id),
            "buyer_email": reservation.buyer_email,
            "total_amount": str(total_amount),
            "installments": [
                {
                    "installment_no": item.installment_no,
                    "amount_due": str(item.amount_due),
                    "due_date": item.due_date.isoformat(),
                }
                for item in installments
            ],
        },
    )
    return plan, installments


async def _load_installment(
    db: AsyncSession, installment_id: uuid.UUID
) -> PaymentInstallment | None:
    stmt = (
        select(PaymentInstallment)
        .where(PaymentInstallment.id == installment_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _raise_payment_rejection(
    db: AsyncSession, installment_id: uuid.UUID, expected_version: int | None
) -> None:
    installment = await _load_installment(db, installment_id)
    if not installment:
        raise InstallmentNotFound()
    if installment.status == InstallmentStatus.PAID.value:
        raise InstallmentAlreadyPaid()
    # still pending: either a stale version or a concurrent writer won the update
    raise VersionConflict(
        f"{ErrorMessage.INSTALLMENT_VERSION_CONFLICT} "
        f"(expected version {expected_version}, current {installment.version})"
    )


async def _sync_reservation_payment_status(
    db: AsyncSession, reservation_id: uuid.UUID
) -> Reservation | None:
    reservation = await db.get(Reservation, reservation_id)
    if not reservation:
        return None

    stmt = select(PaymentInstallment.status).where(
        PaymentInstallment.reservation_id == reservation_id
    )
    statuses = (await db.execute(stmt)).scalars().all()
    paid = [s for s in statuses if s == InstallmentStatus.PAID.value]
    if statuses and len(paid) == len(statuses):
        reservation.payment_status = ReservationPaymentStatus.PAID.value
    elif paid:
        reservation.payment_status = ReservationPaymentStatus.PARTIAL.value
    else:
        reservation.payment_status = ReservationPaymentStatus.PENDING.value
    db.add(reservation)
    return reservation


async def mark_paid(
    db: AsyncSession,
    installment_id: uuid.UUID,
    payment_method: str | None = None,
    payment_reference: str | None = None,
    expected_version: int | None = None,
    paid_by: str | None = None,
    now: datetime | None = None,
) -> PaymentInstallment:
    """Move a pending (or overdue) installment to paid.

    Raises InstallmentNotFound, InstallmentAlreadyPaid (a second call never
    records the payment again) or VersionConflict when ``expected_version``
    no longer matches the stored row.
    """
    paid_at = now or _utcnow()

    conditions = [
        PaymentInstallment.id == installment_id,
        PaymentInstallment.status == InstallmentStatus.PENDING.value,
    ]
    if expected_version is not None:
        conditions.append(PaymentInstallment.version == expected_version)

    stmt = (
        update(PaymentInstallment)
        .where(*conditions)
        .values(
            status=InstallmentStatus.PAID.value,
            paid_at=paid_at,
            paid_by=paid_by,
            payment_method=payment_method,
            payment_reference=payment_reference,
            version=PaymentInstallment.version + 1,
            updated_at=paid_at,
        )
        .execution_options(synchronize_session=False)
    )

    try:
        result = await db.execute(stmt)
        if result.rowcount != 1:
            await _raise_payment_rejection(db, installment_id, expected_version)

        installment = await _load_installment(db, installment_id)
        reservation = await _sync_reservation_payment_status(db, installment.reservation_id)
        db.add(
            ReservationTimelineEvent(
                reservation_id=installment.reservation_id,
                event_type=TimelineEventType.INSTALLMENT_PAID.value,
                description=(
                    f"Installment {installment.installment_no} marked as paid: "
                    f"{installment.amount_due}"
                ),
                performed_by=paid_by,
                event_metadata={
                    "installmentId": str(installment.id),
                    "installmentNo": installment.installment_no,
                    "amountDue": str(installment.amount_due),
                    "paymentMethod": payment_method,
                    "paymentReference": payment_reference,
                },
            )
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError() from exc

    logger.info(
        f"Installment {installment.id} (reservation {installment.reservation_id}) "
        f"paid: {installment.amount_due} via {payment_method or 'unspecified'}"
    )
    await _notify(
        publish_installment_paid_event,
        {
            "event": "installment.paid",
            "installment_id": str(installment.id),
            "reservation_id": str(installment.reservation_id),
            "installment_no": installment.installment_no,
            "amount_due": str(installment.amount_due),
            "paid_at": paid_at.isoformat(),
            "payment_method": payment_method,
            "payment_reference": payment_reference,
            "buyer_email": reservation.buyer_email if reservation else None,
            "reservation_payment_status": reservation.payment_status if reservation else None,
        },
    )
    return installment


async def bulk_mark_paid(
    db: AsyncSession,
    installment_ids: list[uuid.UUID],
    payment_method: str | None = None,
    payment_reference: str | None = None,
    paid_by: str | None = None,
    now: datetime | None = None,
) -> list[BulkPayResult]:
    """Pay each id in its own transaction; one failure never undoes another."""
    results: list[BulkPayResult] = []
    for installment_id in installment_ids:
        try:
            installment = await mark_paid(
                db,
                installment_id,
                payment_method=payment_method,
                payment_reference=payment_reference,
                paid_by=paid_by,
                now=now,
            )
        except InstallmentNotFound as exc:
            results.append(_failed(installment_id, BulkPayOutcome.NOT_FOUND, exc))
        except InstallmentAlreadyPaid as exc:
            results.append(_failed(installment_id, BulkPayOutcome.ALREADY_PAID, exc))
        except VersionConflict as exc:
            results.append(_failed(installment_id, BulkPayOutcome.CONFLICT, exc))
        except PersistenceError as exc:
            results.append(_failed(installment_id, BulkPayOutcome.ERROR, exc))
        else:
            # a later rollback would expire it otherwise
            db.expunge(installment)
            results.append(
                BulkPayResult(
                    installment_id=installment_id,
                    outcome=BulkPayOutcome.OK,
                    installment=installment,
                )
            )

    failed = [r for r in results if r.outcome != BulkPayOutcome.OK]
    logger.info(
        f"Bulk payment: {len(results) - len(failed)} paid, {len(failed)} failed"
        + (f" ({', '.join(str(r.installment_id) for r in failed)})" if failed else "")
    )
    return results


def _failed(installment_id, outcome: BulkPayOutcome, exc) -> BulkPayResult:
    return BulkPayResult(
        installment_id=installment_id,
        outcome=outcome,
        error_code=exc.error_code,
        message=exc.message,
    )


async def list_for_reconciliation(
    db: AsyncSession,
    start_date: date | None = None,
    end_date: date | None = None,
    status: InstallmentStatus | str | None = None,
    min_amount: Decimal | None = None,
    now: datetime | None = None,
) -> list[ReconciliationRecord]:
    """Installments joined with their reservation context, ordered by due date.

    ``status`` matches the stored value only; overdue is reported through
    each record's ``effective_status``.
    """
    now = now or _utcnow()
    stmt = (
        select(PaymentInstallment, Reservation, Tour, Departure, Buyer)
        .select_from(PaymentInstallment)
        .outerjoin(Reservation, Reservation.id == PaymentInstallment.reservation_id)
        .outerjoin(Tour, Tour.id == Reservation.tour_id)
        .outerjoin(Departure, Departure.id == Reservation.departure_id)
        .outerjoin(Buyer, Buyer.id == Reservation.user_id)
    )

    if status is not None:
        stmt = stmt.where(PaymentInstallment.status == InstallmentStatus(status).value)
    if start_date is not None:
        stmt = stmt.where(PaymentInstallment.due_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(PaymentInstallment.due_date <= end_date)
    if min_amount is not None:
        stmt = stmt.where(PaymentInstallment.amount_due >= min_amount)

    stmt = stmt.order_by(PaymentInstallment.due_date, PaymentInstallment.installment_no)

    result = await db.execute(stmt)
    return [
        ReconciliationRecord(
            installment=installment,
            reservation=reservation,
            tour=tour,
            departure=departure,
            buyer=buyer,
            effective_status=derive_effective_status(installment, now),
        )
        for installment, reservation, tour, departure, buyer in result.all()
    ]


async def list_payment_calendar(
    db: AsyncSession,
    start_date: date,
    end_date: date,
    now: datetime | None = None,
) -> list[CalendarDay]:
    if end_date < start_date:
        raise ValidationException(ErrorMessage.INVALID_DATE_RANGE)

    records = await list_for_reconciliation(
        db, start_date=start_date, end_date=end_date, now=now
    )
    days: list[CalendarDay] = []
    for due_date, group in groupby(records, key=lambda r: r.installment.due_date):
        day_records = list(group)
        days.append(
            CalendarDay(
                due_date=due_date,
                total_amount=sum(
                    (money(r.installment.amount_due) for r in day_records), Decimal("0.00")
                ),
                records=day_records,
            )
        )
    return days


async def list_for_reservation(
    db: AsyncSession, reservation_id: uuid.UUID
) -> list[PaymentInstallment]:
    await get_reservation(db, reservation_id)
    return await _installments_of(db, reservation_id)


async def list_timeline(
    db: AsyncSession, reservation_id: uuid.UUID
) -> list[ReservationTimelineEvent]:
    await get_reservation(db, reservation_id)
    stmt = (
        select(ReservationTimelineEvent)
        .where(ReservationTimelineEvent.reservation_id == reservation_id)
        .order_by(ReservationTimelineEvent.created_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _notify(publisher, event_data: dict) -> None:
    # runs after commit; delivery failures are logged only
    try:
        await publisher(event_data)
    except NotificationError as exc:
        logger.warning(f"Notification {event_data.get('event')} not delivered: {exc}")
