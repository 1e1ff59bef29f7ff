from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.customers import customer_to_response
from api.deps import get_current_partner, http_error, require_roles
from database import get_db
from models import Customer, Partner
from models.enums import Role
from schemas.partner import PartnerCreate, PartnerStatusUpdate
from services import partners
from services.dashboards import build_menu
from services.errors import SERVICE_ERRORS
from utils.case import iso

router = APIRouter(prefix="/api", tags=["partners"])


def partner_to_response(p: Partner) -> dict[str, Any]:
    return {
        "id": p.id,
        "username": p.username,
        "name": p.name,
        "email": p.email,
        "phone": p.phone,
        "role": p.role,
        "state": p.state,
        "district": p.district,
        "status": p.status,
        "parentId": p.parent_id,
        "referralCode": p.referral_code,
        "linkedCustomerId": p.linked_customer_id,
        "createdAt": iso(p.created_at),
    }


@router.get("/me")
async def me(partner: Partner = Depends(get_current_partner)):
    """The signed-in partner with their navigation menu."""
    return {**partner_to_response(partner), "menu": build_menu(partner.role)}


@router.post("/partners", status_code=201)
async def create_partner(
    body: PartnerCreate,
    partner: Partner = Depends(require_roles(Role.ADMIN, Role.BDP)),
    db: AsyncSession = Depends(get_db),
):
    try:
        created = await partners.create_partner(db, body, creator=partner)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return partner_to_response(created)


@router.get("/bdp/partners")
async def list_network_partners(
    partner: Partner = Depends(require_roles(Role.BDP)),
    db: AsyncSession = Depends(get_db),
):
    """The BDP's district partners, each with the customers they registered."""
    ddps = await partners.list_partners(db, parent_id=partner.id)
    ddp_ids = [d.id for d in ddps]
    by_ddp: dict[str, list[Customer]] = {d: [] for d in ddp_ids}
    if ddp_ids:
        result = await db.execute(
            select(Customer).where(Customer.ddp_id.in_(ddp_ids)).order_by(Customer.created_at.desc())
        )
        for c in result.scalars().all():
            by_ddp[c.ddp_id].append(c)
    return [
        {**partner_to_response(d), "customers": [customer_to_response(c) for c in by_ddp[d.id]]}
        for d in ddps
    ]


@router.get("/admin/partners")
async def list_partners(
    role: Optional[str] = None,
    status: Optional[str] = None,
    _: Partner = Depends(require_roles(Role.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    rows = await partners.list_partners(db, role=role, status=status)
    return [partner_to_response(p) for p in rows]


@router.patch("/admin/partners/{partner_id}/status")
async def update_partner_status(
    partner_id: str,
    body: PartnerStatusUpdate,
    _: Partner = Depends(require_roles(Role.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    try:
        updated = await partners.update_partner_status(db, partner_id, body.status.value)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return partner_to_response(updated)
