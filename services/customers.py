from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Customer, Partner, Referral
from models.enums import CustomerSource, CustomerStatus, ReferralStatus, ReferralType, Role
from schemas.customer import CustomerCreate
from services import journey
from services.dashboards import network_customers_stmt
from services.notifications import notify
from services.referrals import CUSTOMER_REFERRAL_REWARD

logger = logging.getLogger(__name__)


async def create_customer(
    session: AsyncSession,
    body: CustomerCreate,
    ddp: Optional[Partner] = None,
    source: CustomerSource = CustomerSource.DDP_REGISTRATION,
    referrer: Optional[Partner] = None,
) -> Customer:
    """Register a customer and seed their installation journey."""
    now = datetime.now(timezone.utc)
    customer = Customer(
        id=f"cus-{uuid.uuid4().hex[:12]}",
        name=body.name,
        email=body.email,
        phone=body.phone,
        address=body.address,
        district=body.district,
        state=body.state,
        pincode=body.pincode,
        electricity_board=body.electricity_board,
        consumer_number=body.consumer_number,
        sanctioned_load=body.sanctioned_load,
        avg_monthly_bill=body.avg_monthly_bill,
        roof_type=body.roof_type,
        roof_area=body.roof_area,
        panel_type=body.panel_type.value,
        proposed_capacity=body.proposed_capacity,
        status=CustomerStatus.PENDING.value,
        ddp_id=ddp.id if ddp else None,
        source=source.value,
        referrer_customer_id=referrer.linked_customer_id if referrer else None,
        site_pictures=list(body.site_pictures),
        created_at=now,
        updated_at=now,
    )
    session.add(customer)
    await session.flush()
    await journey.initialize_milestones(session, customer.id)

    if referrer is not None:
        session.add(Referral(
            id=f"ref-{uuid.uuid4().hex[:12]}",
            referrer_id=referrer.id,
            referred_type=ReferralType.CUSTOMER.value,
            referred_customer_id=customer.id,
            referred_name=customer.name,
            referred_phone=customer.phone,
            referral_code=referrer.referral_code,
            status=ReferralStatus.PENDING.value,
            reward_amount=CUSTOMER_REFERRAL_REWARD,
        ))
        await notify(
            session,
            referrer.id,
            title="New referral",
            message=f"{customer.name} registered with your referral code",
            type="referral",
        )
        await session.flush()

    logger.info("Customer %s registered (%s) by %s", customer.id, source.value, ddp.id if ddp else "website")
    return customer


async def customers_for(session: AsyncSession, partner: Partner, status: Optional[str] = None) -> list[Customer]:
    """Customers visible to a partner, newest first."""
    if partner.role == Role.ADMIN.value:
        stmt = select(Customer)
    elif partner.role == Role.BDP.value:
        stmt = network_customers_stmt(partner.id)
    elif partner.role == Role.DDP.value:
        stmt = select(Customer).where(Customer.ddp_id == partner.id)
    else:
        stmt = select(Customer).where(
            Customer.referrer_customer_id == partner.linked_customer_id,
            Customer.referrer_customer_id.is_not(None),
        )
    if status:
        stmt = stmt.where(Customer.status == status)
    result = await session.execute(stmt.order_by(Customer.created_at.desc()))
    return list(result.scalars().all())
