from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Customer, Partner
from models.enums import CustomerStatus, PartnerStatus, Role
from schemas.partner import CustomerPartnerEnrollment, PartnerCreate
from services.commission_rates import CUSTOMER_REFERRAL_MIN_KW, round_capacity
from services.errors import Conflict, DomainError, NotFound
from services.notifications import notify

logger = logging.getLogger(__name__)


async def create_partner(session: AsyncSession, body: PartnerCreate, creator: Partner) -> Partner:
    """
    Create a partner account in the pending state.
    A BDP may only create DDPs, and they are parented to that BDP.
    Customer partners come only from enrolment, never from here.
    """
    if body.role is Role.CUSTOMER_PARTNER:
        raise DomainError("Customer partners are created through enrolment")
    if creator.role == Role.BDP.value:
        if body.role is not Role.DDP:
            raise DomainError("A BDP can only add district partners")
        parent_id = creator.id
    elif creator.role == Role.ADMIN.value:
        parent_id = body.parent_id
    else:
        raise DomainError("Not allowed to create partners")

    if parent_id:
        parent = await session.get(Partner, parent_id)
        if parent is None or parent.role != Role.BDP.value:
            raise DomainError("Parent must be a business development partner")

    taken = await session.execute(select(Partner.id).where(Partner.username == body.username))
    if taken.scalar_one_or_none() is not None:
        raise Conflict(f"Username {body.username} is already taken")

    partner = Partner(
        id=f"ptr-{uuid.uuid4().hex[:12]}",
        username=body.username,
        name=body.name,
        email=body.email,
        phone=body.phone,
        role=body.role.value,
        state=body.state,
        district=body.district,
        address=body.address,
        status=PartnerStatus.PENDING.value,
        parent_id=parent_id,
    )
    session.add(partner)
    await session.flush()
    logger.info("Partner %s (%s) created by %s", partner.id, partner.role, creator.id)
    return partner


async def list_partners(
    session: AsyncSession,
    role: Optional[str] = None,
    status: Optional[str] = None,
    parent_id: Optional[str] = None,
) -> list[Partner]:
    stmt = select(Partner).order_by(Partner.created_at.desc())
    if role:
        stmt = stmt.where(Partner.role == role)
    if status:
        stmt = stmt.where(Partner.status == status)
    if parent_id:
        stmt = stmt.where(Partner.parent_id == parent_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_partner_status(session: AsyncSession, partner_id: str, status: str) -> Partner:
    partner = await session.get(Partner, partner_id)
    if partner is None:
        raise NotFound("Partner")
    partner.status = PartnerStatus(status).value
    await session.flush()
    logger.info("Partner %s status -> %s", partner.id, partner.status)
    await notify(
        session,
        partner.id,
        title="Account status updated",
        message=f"Your partner account is now {partner.status}",
        type="status",
    )
    return partner


ENROLLABLE_STATUSES = (
    CustomerStatus.APPROVED.value,
    CustomerStatus.INSTALLATION_SCHEDULED.value,
    CustomerStatus.COMPLETED.value,
)


async def enroll_customer_partner(session: AsyncSession, body: CustomerPartnerEnrollment) -> Partner:
    """
    Turn an approved customer of at least CUSTOMER_REFERRAL_MIN_KW into an
    approved customer partner with a CP-prefixed referral code.
    """
    result = await session.execute(
        select(Customer)
        .where(Customer.phone == body.phone, Customer.status.in_(ENROLLABLE_STATUSES))
        .order_by(Customer.created_at)
    )
    installed = list(result.scalars().all())
    if not installed:
        raise DomainError("No approved installation found for this phone number")

    linked = await session.execute(
        select(Partner.linked_customer_id).where(
            Partner.role == Role.CUSTOMER_PARTNER.value,
            Partner.linked_customer_id.in_([c.id for c in installed]),
        )
    )
    enrolled = set(linked.scalars().all())
    open_installs = [c for c in installed if c.id not in enrolled]
    if not open_installs:
        raise Conflict("Already registered as a customer partner")
    customer = next(
        (c for c in open_installs if round_capacity(c.proposed_capacity) >= CUSTOMER_REFERRAL_MIN_KW),
        None,
    )
    if customer is None:
        raise DomainError(f"Only installations of {CUSTOMER_REFERRAL_MIN_KW} kW or above can join")

    taken = await session.execute(select(Partner.id).where(Partner.username == body.username))
    if taken.scalar_one_or_none() is not None:
        raise Conflict(f"Username {body.username} is already taken")

    base = "".join(customer.name.split())[:6].upper()
    while True:
        code = f"CP{base}{uuid.uuid4().hex[:4].upper()}"
        clash = await session.execute(select(Partner.id).where(Partner.referral_code == code))
        if clash.scalar_one_or_none() is None:
            break

    partner = Partner(
        id=f"ptr-{uuid.uuid4().hex[:12]}",
        username=body.username,
        name=customer.name,
        email=body.email or customer.email,
        phone=customer.phone,
        role=Role.CUSTOMER_PARTNER.value,
        state=customer.state,
        district=customer.district,
        address=customer.address,
        status=PartnerStatus.APPROVED.value,
        referral_code=code,
        linked_customer_id=customer.id,
    )
    session.add(partner)
    await session.flush()
    logger.info("Customer %s enrolled as customer partner %s", customer.id, partner.id)
    return partner
