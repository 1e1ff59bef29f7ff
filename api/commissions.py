from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_partner, http_error, require_roles
from database import get_db
from models import Commission, Partner, Payout
from models.enums import Role
from schemas.commission import CommissionStatusUpdate, PayoutCreate
from services import commissions
from services.errors import SERVICE_ERRORS
from utils.case import iso

router = APIRouter(prefix="/api", tags=["commissions"])

_admin = require_roles(Role.ADMIN)


def _commission_to_response(c: Commission) -> dict[str, Any]:
    return {
        "id": c.id,
        "partnerId": c.partner_id,
        "partnerType": c.partner_type,
        "customerId": c.customer_id,
        "orderId": c.order_id,
        "source": c.source,
        "capacityKw": c.capacity_kw,
        "panelType": c.panel_type,
        "commissionAmount": c.commission_amount,
        "status": c.status,
        "paidAt": iso(c.paid_at),
        "notes": c.notes,
        "createdAt": iso(c.created_at),
    }


def _payout_to_response(p: Payout) -> dict[str, Any]:
    return {
        "id": p.id,
        "partnerId": p.partner_id,
        "commissionId": p.commission_id,
        "amount": p.amount,
        "mode": p.mode,
        "utr": p.utr,
        "status": p.status,
        "failureReason": p.failure_reason,
        "processedAt": iso(p.processed_at),
        "createdAt": iso(p.created_at),
    }


async def _commissions_for(db: AsyncSession, partner: Partner, partner_id: Optional[str], status: Optional[str]):
    stmt = select(Commission).order_by(Commission.created_at.desc())
    if partner.role != Role.ADMIN.value:
        stmt = stmt.where(Commission.partner_id == partner.id)
    elif partner_id:
        stmt = stmt.where(Commission.partner_id == partner_id)
    if status:
        stmt = stmt.where(Commission.status == status)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.get("/commissions")
async def list_commissions(
    partner_id: Optional[str] = Query(None, alias="partnerId"),
    status: Optional[str] = None,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    """Own commissions; admins see everyone's and may filter by partner."""
    rows = await _commissions_for(db, partner, partner_id, status)
    return [_commission_to_response(c) for c in rows]


@router.get("/commissions/summary")
async def commission_summary(
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    rows = await _commissions_for(db, partner, None, None)
    return commissions.commission_summary(rows).model_dump(by_alias=True)


@router.patch("/commissions/{commission_id}/status")
async def update_commission_status(
    commission_id: str,
    body: CommissionStatusUpdate,
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        commission = await commissions.update_commission_status(db, commission_id, body.status.value)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return _commission_to_response(commission)


@router.get("/payouts")
async def list_payouts(
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Payout).order_by(Payout.created_at.desc())
    if partner.role != Role.ADMIN.value:
        stmt = stmt.where(Payout.partner_id == partner.id)
    result = await db.execute(stmt)
    return [_payout_to_response(p) for p in result.scalars().all()]


@router.post("/payouts", status_code=201)
async def create_payout(
    body: PayoutCreate,
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        payout = await commissions.record_payout(db, body.commission_id, body.mode.value, body.utr)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return _payout_to_response(payout)
