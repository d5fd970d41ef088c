from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.installments.helpers import to_bulk_response, to_installment_item
from app.api.installments.schemas import (
    BulkMarkPaidRequest,
    BulkMarkPaidResponse,
    InstallmentItem,
    MarkPaidRequest,
)
from app.api.installments.service import bulk_mark_paid, mark_paid
from app.core.request_context import get_actor_id, is_admin_user
from app.db.main import get_session

installments_router = APIRouter()


@installments_router.put(
    "/{installment_id}/pay",
    response_model=InstallmentItem,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
)
async def pay_installment(
    installment_id: UUID,
    payload: MarkPaidRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    is_admin_user(request)
    now = datetime.now(timezone.utc)
    installment = await mark_paid(
        session,
        installment_id,
        payment_method=payload.payment_method,
        payment_reference=payload.payment_reference,
        expected_version=payload.version,
        paid_by=get_actor_id(request),
        now=now,
    )
    return to_installment_item(installment, now)


@installments_router.post(
    "/bulk-pay",
    response_model=BulkMarkPaidResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
)
async def bulk_pay_installments(
    payload: BulkMarkPaidRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    is_admin_user(request)
    now = datetime.now(timezone.utc)
    results = await bulk_mark_paid(
        session,
        payload.installment_ids,
        payment_method=payload.payment_method,
        payment_reference=payload.payment_reference,
        paid_by=get_actor_id(request),
        now=now,
    )
    return to_bulk_response(results, now)
