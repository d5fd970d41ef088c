from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.core.common.constants import BulkPayOutcome, InstallmentStatus


class ScheduleItem(BaseModel):
    amount_due: Annotated[Decimal, Field(alias="amountDue")]
    due_date: Annotated[date, Field(alias="dueDate")]
    description: str | None = None

    model_config = {"populate_by_name": True}


class CreateInstallmentPlanRequest(BaseModel):
    total_amount: Annotated[Decimal | None, Field(alias="totalAmount")] = None
    schedule: list[ScheduleItem] | None = None
    # used when no explicit schedule is sent
    first_due_date: Annotated[date | None, Field(alias="firstDueDate")] = None
    number_of_installments: Annotated[int | None, Field(alias="numberOfInstallments")] = None
    deposit_percentage: Annotated[Decimal | None, Field(alias="depositPercentage")] = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_schedule_source(self) -> "CreateInstallmentPlanRequest":
        if self.schedule is None and self.first_due_date is None:
            raise ValueError("Either schedule or firstDueDate is required")
        return self


class InstallmentItem(BaseModel):
    id: UUID
    reservation_id: Annotated[UUID, Field(alias="reservationId")]
    plan_id: Annotated[UUID | None, Field(alias="planId")] = None
    installment_no: Annotated[int, Field(alias="installmentNo")]
    description: str | None = None
    amount_due: Annotated[Decimal, Field(alias="amountDue")]
    due_date: Annotated[date, Field(alias="dueDate")]
    status: InstallmentStatus
    effective_status: Annotated[InstallmentStatus, Field(alias="effectiveStatus")]
    payment_method: Annotated[str | None, Field(alias="paymentMethod")] = None
    payment_reference: Annotated[str | None, Field(alias="paymentReference")] = None
    paid_at: Annotated[datetime | None, Field(alias="paidAt")] = None
    paid_by: Annotated[str | None, Field(alias="paidBy")] = None
    version: int

    model_config = {"populate_by_name": True}


class InstallmentPlanResponse(BaseModel):
    plan_id: Annotated[UUID, Field(alias="planId")]
    reservation_id: Annotated[UUID, Field(alias="reservationId")]
    total_amount: Annotated[Decimal, Field(alias="totalAmount")]
    installments: list[InstallmentItem]

    model_config = {"populate_by_name": True}


class InstallmentListResponse(BaseModel):
    reservation_id: Annotated[UUID, Field(alias="reservationId")]
    installments: list[InstallmentItem]

    model_config = {"populate_by_name": True}


class MarkPaidRequest(BaseModel):
    payment_method: Annotated[str | None, Field(alias="paymentMethod", max_length=50)] = None
    payment_reference: Annotated[str | None, Field(alias="paymentReference", max_length=100)] = None
    # version the caller last read; rejected with 409 when stale
    version: int

    model_config = {"populate_by_name": True}


class BulkMarkPaidRequest(BaseModel):
    installment_ids: Annotated[list[UUID], Field(alias="installmentIds", min_length=1)]
    payment_method: Annotated[str | None, Field(alias="paymentMethod", max_length=50)] = None
    payment_reference: Annotated[str | None, Field(alias="paymentReference", max_length=100)] = None

    model_config = {"populate_by_name": True}


class BulkPayResultItem(BaseModel):
    installment_id: Annotated[UUID, Field(alias="installmentId")]
    outcome: BulkPayOutcome
    code: str | None = None
    message: str | None = None
    installment: InstallmentItem | None = None

    model_config = {"populate_by_name": True}


class BulkMarkPaidResponse(BaseModel):
    succeeded: int
    failed: int
    results: list[BulkPayResultItem]


class TimelineEventItem(BaseModel):
    id: UUID
    event_type: Annotated[str, Field(alias="eventType")]
    description: str
    performed_by: Annotated[str | None, Field(alias="performedBy")] = None
    metadata: dict | None = None
    created_at: Annotated[datetime, Field(alias="createdAt")]

    model_config = {"populate_by_name": True}
