from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.installments.service import list_for_reconciliation, list_payment_calendar
from app.api.payments.helpers import to_calendar_day, to_reconciliation_row
from app.api.payments.schemas import CalendarDayItem, ReconciliationRow
from app.core.common.constants import InstallmentStatus
from app.core.messages import SuccessMessage
from app.core.request_context import is_admin_user
from app.db.main import get_session
from app.utils.response import ApiResponse, MetaData, success_response

payments_router = APIRouter()


@payments_router.get(
    "/reconciliation",
    response_model=ApiResponse[list[ReconciliationRow]],
    response_model_by_alias=True,
)
async def get_reconciliation(
    request: Request,
    start_date: Annotated[date | None, Query(alias="startDate")] = None,
    end_date: Annotated[date | None, Query(alias="endDate")] = None,
    status: Annotated[InstallmentStatus | None, Query()] = None,
    min_amount: Annotated[Decimal | None, Query(alias="minAmount", ge=0)] = None,
    session: AsyncSession = Depends(get_session),
):
    is_admin_user(request)
    now = datetime.now(timezone.utc)
    records = await list_for_reconciliation(
        session,
        start_date=start_date,
        end_date=end_date,
        status=status,
        min_amount=min_amount,
        now=now,
    )
    filters = {
        "startDate": start_date.isoformat() if start_date else None,
        "endDate": end_date.isoformat() if end_date else None,
        "status": status.value if status else None,
        "minAmount": str(min_amount) if min_amount is not None else None,
    }
    return success_response(
        data=[to_reconciliation_row(record, now) for record in records],
        message=SuccessMessage.RECONCILIATION_FETCHED,
        meta=MetaData(total=len(records), filters=filters),
    )


@payments_router.get(
    "/calendar",
    response_model=ApiResponse[list[CalendarDayItem]],
    response_model_by_alias=True,
)
async def get_payment_calendar(
    request: Request,
    start_date: Annotated[date, Query(alias="startDate")],
    end_date: Annotated[date, Query(alias="endDate")],
    session: AsyncSession = Depends(get_session),
):
    is_admin_user(request)
    now = datetime.now(timezone.utc)
    days = await list_payment_calendar(session, start_date, end_date, now=now)
    return success_response(
        data=[to_calendar_day(day, now) for day in days],
        message=SuccessMessage.CALENDAR_FETCHED,
        meta=MetaData(
            total=sum(len(day.records) for day in days),
            filters={"startDate": start_date.isoformat(), "endDate": end_date.isoformat()},
        ),
    )
