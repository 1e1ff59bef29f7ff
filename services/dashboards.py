"""Read-only per-role aggregates and the role navigation menu."""
from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Commission, Customer, Partner
from models.enums import CommissionStatus, CustomerStatus, PartnerStatus, PartnerType, Role
from services.commission_rates import CUSTOMER_REFERRAL_MIN_KW, round_capacity

CALCULATOR_ITEM = {"title": "Subsidy Calculator", "url": "/calculator", "icon": "calculator"}

MENUS: dict[Role, list[dict[str, str]]] = {
    Role.ADMIN: [
        {"title": "Dashboard", "url": "/admin/dashboard", "icon": "layout-dashboard"},
        {"title": "Partners", "url": "/admin/partners", "icon": "building"},
        {"title": "All Customers", "url": "/admin/customers", "icon": "users"},
        {"title": "Vendors", "url": "/admin/vendors", "icon": "truck"},
        {"title": "Payouts", "url": "/admin/payouts", "icon": "wallet"},
        {"title": "Feedback", "url": "/admin/feedback", "icon": "message-square"},
        CALCULATOR_ITEM,
    ],
    Role.BDP: [
        {"title": "Dashboard", "url": "/bdp/dashboard", "icon": "layout-dashboard"},
        {"title": "District Partners", "url": "/bdp/partners", "icon": "building"},
        {"title": "Add Partner", "url": "/bdp/partners/new", "icon": "user-plus"},
        {"title": "All Customers", "url": "/bdp/customers", "icon": "users"},
        {"title": "Commission Wallet", "url": "/bdp/wallet", "icon": "wallet"},
        CALCULATOR_ITEM,
    ],
    Role.DDP: [
        {"title": "Dashboard", "url": "/ddp/dashboard", "icon": "layout-dashboard"},
        {"title": "Customers", "url": "/ddp/customers", "icon": "users"},
        {"title": "Add Customer", "url": "/ddp/customers/new", "icon": "user-plus"},
        {"title": "Applications", "url": "/ddp/applications", "icon": "file-text"},
        {"title": "Earnings", "url": "/ddp/earnings", "icon": "wallet"},
        CALCULATOR_ITEM,
    ],
    Role.CUSTOMER_PARTNER: [
        {"title": "Dashboard", "url": "/customer-partner/dashboard", "icon": "layout-dashboard"},
        {"title": "My Referrals", "url": "/customer-partner/referrals", "icon": "users"},
        {"title": "Earnings", "url": "/customer-partner/earnings", "icon": "wallet"},
        CALCULATOR_ITEM,
    ],
}


def build_menu(role: str) -> list[dict[str, str]]:
    """Navigation entries for a role; every Role has an entry."""
    return [dict(item) for item in MENUS[Role(role)]]


async def _count(session: AsyncSession, stmt) -> int:
    result = await session.execute(stmt)
    return int(result.scalar_one() or 0)


async def _sum(session: AsyncSession, stmt) -> float:
    result = await session.execute(stmt)
    return float(result.scalar_one() or 0)


async def admin_stats(session: AsyncSession) -> dict[str, Any]:
    return {
        "totalBDPs": await _count(session, select(func.count(Partner.id)).where(Partner.role == Role.BDP.value)),
        "totalDDPs": await _count(session, select(func.count(Partner.id)).where(Partner.role == Role.DDP.value)),
        "totalCustomers": await _count(session, select(func.count(Customer.id))),
        "pendingPartners": await _count(
            session,
            select(func.count(Partner.id)).where(
                Partner.status == PartnerStatus.PENDING.value,
                Partner.role.in_([Role.BDP.value, Role.DDP.value]),
            ),
        ),
        "completedInstallations": await _count(
            session, select(func.count(Customer.id)).where(Customer.status == CustomerStatus.COMPLETED.value)
        ),
        "totalCommissions": await _sum(session, select(func.coalesce(func.sum(Commission.commission_amount), 0))),
        "pendingCommissions": await _sum(
            session,
            select(func.coalesce(func.sum(Commission.commission_amount), 0)).where(
                Commission.status == CommissionStatus.PENDING.value
            ),
        ),
    }


def network_customers_stmt(bdp_id: str):
    """Customers registered by any DDP under this BDP."""
    ddp_ids = select(Partner.id).where(Partner.parent_id == bdp_id)
    return select(Customer).where(Customer.ddp_id.in_(ddp_ids))


async def bdp_stats(session: AsyncSession, bdp_id: str) -> dict[str, Any]:
    partners = (await session.execute(select(Partner).where(Partner.parent_id == bdp_id))).scalars().all()
    customers = (await session.execute(network_customers_stmt(bdp_id))).scalars().all()
    return {
        "totalPartners": len(partners),
        "activePartners": sum(1 for p in partners if p.status == PartnerStatus.APPROVED.value),
        "totalCustomers": len(customers),
        "completedInstallations": sum(1 for c in customers if c.status == CustomerStatus.COMPLETED.value),
    }


async def ddp_stats(session: AsyncSession, ddp_id: str) -> dict[str, Any]:
    customers = (await session.execute(select(Customer).where(Customer.ddp_id == ddp_id))).scalars().all()
    return {
        "totalCustomers": len(customers),
        "pendingApplications": sum(1 for c in customers if c.status == CustomerStatus.PENDING.value),
        "approvedApplications": sum(
            1 for c in customers
            if c.status in (CustomerStatus.APPROVED.value, CustomerStatus.INSTALLATION_SCHEDULED.value)
        ),
        "completedInstallations": sum(1 for c in customers if c.status == CustomerStatus.COMPLETED.value),
    }


async def customer_partner_stats(session: AsyncSession, partner: Partner) -> dict[str, Any]:
    referred: list[Customer] = []
    if partner.linked_customer_id:
        referred = list(
            (await session.execute(
                select(Customer).where(Customer.referrer_customer_id == partner.linked_customer_id)
            )).scalars().all()
        )
    commissions = (await session.execute(
        select(Commission).where(
            Commission.partner_id == partner.id,
            Commission.partner_type == PartnerType.CUSTOMER_PARTNER.value,
        )
    )).scalars().all()
    paid = sum(c.commission_amount for c in commissions if c.status == CommissionStatus.PAID.value)
    pending = sum(
        c.commission_amount for c in commissions
        if c.status in (CommissionStatus.PENDING.value, CommissionStatus.APPROVED.value)
    )
    completed = [c for c in referred if c.status == CustomerStatus.COMPLETED.value]
    return {
        "totalReferrals": len(referred),
        "completedReferrals": len(completed),
        "pendingReferrals": len(referred) - len(completed),
        "eligibleReferrals": sum(
            1 for c in completed if round_capacity(c.proposed_capacity) >= CUSTOMER_REFERRAL_MIN_KW
        ),
        "totalEarnings": paid + pending,
        "paidEarnings": paid,
        "pendingEarnings": pending,
        "referralCode": partner.referral_code,
    }
