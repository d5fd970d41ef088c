from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.installments.helpers import (
    to_installment_item,
    to_plan_response,
    to_timeline_item,
)
from app.api.installments.schemas import (
    CreateInstallmentPlanRequest,
    InstallmentListResponse,
    InstallmentPlanResponse,
    TimelineEventItem,
)
from app.api.installments.service import (
    ScheduleEntry,
    build_default_schedule,
    create_installment_plan,
    get_reservation,
    list_for_reservation,
    list_timeline,
    outstanding_amount,
)
from app.api.reservations.models import Reservation
from app.core.exceptions import ReservationNotFound
from app.core.request_context import ensure_admin_or_owner, get_actor_id, is_admin_user
from app.db.main import get_session

reservations_router = APIRouter()


async def _get_visible_reservation(
    session: AsyncSession, request: Request, reservation_id: UUID
) -> Reservation:
    # buyers get the same 403 for unknown and foreign reservations
    try:
        reservation = await get_reservation(session, reservation_id)
    except ReservationNotFound:
        ensure_admin_or_owner(request, None)
        raise
    ensure_admin_or_owner(request, reservation.user_id)
    return reservation


@reservations_router.get(
    "/{reservation_id}/installments",
    response_model=InstallmentListResponse,
    response_model_by_alias=True,
)
async def get_reservation_installments(
    reservation_id: UUID,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    await _get_visible_reservation(session, request, reservation_id)

    now = datetime.now(timezone.utc)
    installments = await list_for_reservation(session, reservation_id)
    return InstallmentListResponse(
        reservationId=reservation_id,
        installments=[to_installment_item(item, now) for item in installments],
    )


@reservations_router.post(
    "/{reservation_id}/installments",
    response_model=InstallmentPlanResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_reservation_installment_plan(
    reservation_id: UUID,
    payload: CreateInstallmentPlanRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    is_admin_user(request)

    total_amount = payload.total_amount
    if total_amount is None:
        reservation = await get_reservation(session, reservation_id)
        total_amount = reservation.total_price

    if payload.schedule is not None:
        schedule = [
            ScheduleEntry(item.amount_due, item.due_date, item.description)
            for item in payload.schedule
        ]
    else:
        schedule = build_default_schedule(
            await outstanding_amount(session, reservation_id, total_amount),
            payload.first_due_date,
            number_of_installments=payload.number_of_installments,
            deposit_percentage=payload.deposit_percentage,
        )

    plan, installments = await create_installment_plan(
        session,
        reservation_id,
        total_amount,
        schedule,
        created_by=get_actor_id(request),
    )
    return to_plan_response(plan, installments, datetime.now(timezone.utc))


@reservations_router.get(
    "/{reservation_id}/timeline",
    response_model=list[TimelineEventItem],
    response_model_by_alias=True,
)
async def get_reservation_timeline(
    reservation_id: UUID,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    await _get_visible_reservation(session, request, reservation_id)

    events = await list_timeline(session, reservation_id)
    return [to_timeline_item(event) for event in events]
