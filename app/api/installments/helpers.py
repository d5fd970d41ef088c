from __future__ import annotations

from datetime import datetime

from app.api.installments.models import (
    InstallmentPlan,
    PaymentInstallment,
    ReservationTimelineEvent,
)
from app.api.installments.schemas import (
    BulkMarkPaidResponse,
    BulkPayResultItem,
    InstallmentItem,
    InstallmentPlanResponse,
    TimelineEventItem,
)
from app.api.installments.service import BulkPayResult, derive_effective_status
from app.core.common.constants import BulkPayOutcome


def to_installment_item(item: PaymentInstallment, now: datetime) -> InstallmentItem:
    return InstallmentItem(
        id=item.id,
        reservationId=item.reservation_id,
        planId=item.plan_id,
        installmentNo=item.installment_no,
        description=item.description,
        amountDue=item.amount_due,
        dueDate=item.due_date,
        status=item.status,
        effectiveStatus=derive_effective_status(item, now),
        paymentMethod=item.payment_method,
        paymentReference=item.payment_reference,
        paidAt=item.paid_at,
        paidBy=item.paid_by,
        version=item.version,
    )


def to_plan_response(
    plan: InstallmentPlan, installments: list[PaymentInstallment], now: datetime
) -> InstallmentPlanResponse:
    return InstallmentPlanResponse(
        planId=plan.id,
        reservationId=plan.reservation_id,
        totalAmount=plan.total_amount,
        installments=[to_installment_item(item, now) for item in installments],
    )


def to_bulk_response(results: list[BulkPayResult], now: datetime) -> BulkMarkPaidResponse:
    succeeded = sum(1 for r in results if r.outcome == BulkPayOutcome.OK)
    return BulkMarkPaidResponse(
        succeeded=succeeded,
        failed=len(results) - succeeded,
        results=[
            BulkPayResultItem(
                installmentId=r.installment_id,
                outcome=r.outcome,
                code=r.error_code,
                message=r.message,
                installment=to_installment_item(r.installment, now) if r.installment else None,
            )
            for r in results
        ],
    )


def to_timeline_item(event: ReservationTimelineEvent) -> TimelineEventItem:
    return TimelineEventItem(
        id=event.id,
        eventType=event.event_type,
        description=event.description,
        performedBy=event.performed_by,
        metadata=event.event_metadata,
        createdAt=event.created_at,
    )
