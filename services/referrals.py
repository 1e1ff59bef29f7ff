from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Customer, Partner, Referral
from models.enums import CustomerStatus, PartnerStatus, ReferralStatus, ReferralType, Role
from schemas.referral import ReferralCreate

logger = logging.getLogger(__name__)

CUSTOMER_REFERRAL_REWARD = 1_000
PARTNER_REFERRAL_REWARD = 2_000
CUSTOMER_PARTNER_REFERRAL_REWARD = 10_000
PARTNER_REFERRAL_THRESHOLD = 15


async def get_or_create_referral_code(session: AsyncSession, partner: Partner) -> str:
    if partner.referral_code:
        return partner.referral_code
    prefix = (partner.name or "REF")[:3].upper()
    while True:
        code = f"{prefix}{uuid.uuid4().hex[:6].upper()}"
        taken = await session.execute(select(Partner.id).where(Partner.referral_code == code))
        if taken.scalar_one_or_none() is None:
            break
    partner.referral_code = code
    await session.flush()
    return code


async def partner_by_referral_code(session: AsyncSession, code: str) -> Optional[Partner]:
    if not code:
        return None
    result = await session.execute(select(Partner).where(Partner.referral_code == code.strip().upper()))
    return result.scalar_one_or_none()


async def create_referral(session: AsyncSession, referrer: Partner, body: ReferralCreate) -> Referral:
    code = await get_or_create_referral_code(session, referrer)
    reward = PARTNER_REFERRAL_REWARD if body.referred_type is ReferralType.PARTNER else CUSTOMER_REFERRAL_REWARD
    referral = Referral(
        id=f"ref-{uuid.uuid4().hex[:12]}",
        referrer_id=referrer.id,
        referred_type=body.referred_type.value,
        referred_customer_id=body.referred_customer_id,
        referred_partner_id=body.referred_partner_id,
        referred_name=body.referred_name,
        referred_phone=body.referred_phone,
        referral_code=code,
        status=ReferralStatus.PENDING.value,
        reward_amount=reward,
    )
    session.add(referral)
    await session.flush()
    return referral


async def convert_customer_partner_referral(session: AsyncSession, referrer: Partner, customer: Customer) -> Optional[Referral]:
    """Mark the referrer's pending referral for this customer converted, matching by id or phone."""
    result = await session.execute(
        select(Referral).where(
            Referral.referrer_id == referrer.id,
            Referral.status == ReferralStatus.PENDING.value,
            or_(Referral.referred_customer_id == customer.id, Referral.referred_phone == customer.phone),
        )
    )
    referral = result.scalars().first()
    if referral is None:
        return None
    referral.status = ReferralStatus.CONVERTED.value
    referral.reward_amount = CUSTOMER_PARTNER_REFERRAL_REWARD
    referral.referred_customer_id = customer.id
    referral.converted_at = datetime.now(timezone.utc)
    await session.flush()
    return referral


async def check_partner_referral_conversion(session: AsyncSession, ddp_id: Optional[str]) -> Optional[Referral]:
    """
    Convert the referral that brought this DDP in once the DDP has
    PARTNER_REFERRAL_THRESHOLD completed installations. Returns the converted referral.
    """
    if not ddp_id:
        return None
    result = await session.execute(
        select(Referral).where(
            Referral.referred_partner_id == ddp_id,
            Referral.status == ReferralStatus.PENDING.value,
        )
    )
    referral = result.scalars().first()
    if referral is None:
        return None
    completed = await session.execute(
        select(func.count(Customer.id)).where(
            Customer.ddp_id == ddp_id,
            Customer.status == CustomerStatus.COMPLETED.value,
        )
    )
    count = int(completed.scalar_one())
    if count < PARTNER_REFERRAL_THRESHOLD:
        return None
    referral.status = ReferralStatus.CONVERTED.value
    referral.reward_amount = PARTNER_REFERRAL_REWARD
    referral.converted_at = datetime.now(timezone.utc)
    await session.flush()
    logger.info("Partner referral %s converted after %d installations", referral.id, count)
    return referral


async def customer_partner_for_code(session: AsyncSession, code: Optional[str]) -> Optional[Partner]:
    """Resolve a referral code to an approved customer partner, or None."""
    partner = await partner_by_referral_code(session, code or "")
    if partner is None or partner.role != Role.CUSTOMER_PARTNER.value:
        return None
    if partner.status != PartnerStatus.APPROVED.value:
        return None
    return partner
