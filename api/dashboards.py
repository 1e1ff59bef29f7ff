from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_partner, require_roles
from database import get_db
from models import Partner
from models.enums import Role
from services import dashboards

router = APIRouter(prefix="/api", tags=["dashboards"])


@router.get("/menu")
async def menu(partner: Partner = Depends(get_current_partner)):
    return dashboards.build_menu(partner.role)


@router.get("/admin/stats")
async def admin_stats(
    _: Partner = Depends(require_roles(Role.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    return await dashboards.admin_stats(db)


@router.get("/bdp/stats")
async def bdp_stats(
    partner: Partner = Depends(require_roles(Role.BDP)),
    db: AsyncSession = Depends(get_db),
):
    return await dashboards.bdp_stats(db, partner.id)


@router.get("/ddp/stats")
async def ddp_stats(
    partner: Partner = Depends(require_roles(Role.DDP)),
    db: AsyncSession = Depends(get_db),
):
    return await dashboards.ddp_stats(db, partner.id)


@router.get("/customer-partner/stats")
async def customer_partner_stats(
    partner: Partner = Depends(require_roles(Role.CUSTOMER_PARTNER)),
    db: AsyncSession = Depends(get_db),
):
    return await dashboards.customer_partner_stats(db, partner)
