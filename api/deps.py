"""
Request identity and error translation shared by the routers.

Authentication happens upstream; the authenticated partner id arrives in the
X-Partner-Id header.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import Customer, Partner
from models.enums import PartnerStatus, Role
from services.errors import Conflict, NotFound, PayloadTooLarge


async def get_current_partner(
    x_partner_id: Optional[str] = Header(None, alias="X-Partner-Id"),
    db: AsyncSession = Depends(get_db),
) -> Partner:
    if not x_partner_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    partner = await db.get(Partner, x_partner_id)
    if partner is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if partner.status != PartnerStatus.APPROVED.value:
        raise HTTPException(status_code=403, detail="Account is not approved")
    return partner


def require_roles(*roles: Role):
    allowed = {r.value for r in roles}

    async def _dependency(partner: Partner = Depends(get_current_partner)) -> Partner:
        if partner.role not in allowed:
            raise HTTPException(status_code=403, detail="Access denied")
        return partner

    return _dependency


def http_error(exc: Exception) -> HTTPException:
    """Map a service-layer error to the HTTP status the routers return for it."""
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, Conflict):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, PayloadTooLarge):
        return HTTPException(status_code=413, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


async def ensure_customer_access(db: AsyncSession, partner: Partner, customer: Customer) -> None:
    """Admins see everyone; a BDP sees its DDPs' customers; a DDP sees its own."""
    if partner.role == Role.ADMIN.value:
        return
    if partner.role == Role.DDP.value and customer.ddp_id == partner.id:
        return
    if partner.role == Role.BDP.value and customer.ddp_id:
        result = await db.execute(select(Partner.parent_id).where(Partner.id == customer.ddp_id))
        if result.scalar_one_or_none() == partner.id:
            return
    if (
        partner.role == Role.CUSTOMER_PARTNER.value
        and partner.linked_customer_id
        and partner.linked_customer_id in (customer.id, customer.referrer_customer_id)
    ):
        return
    raise HTTPException(status_code=403, detail="Access denied")


async def load_customer(db: AsyncSession, customer_id: str, partner: Partner) -> Customer:
    customer = await db.get(Customer, customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    await ensure_customer_access(db, partner, customer)
    return customer
