from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_partner, http_error
from database import get_db
from models import Partner, Referral
from schemas.referral import ReferralCreate
from services import referrals
from services.errors import SERVICE_ERRORS
from utils.case import iso

router = APIRouter(prefix="/api/referrals", tags=["referrals"])


def _referral_to_response(r: Referral) -> dict:
    return {
        "id": r.id,
        "referredType": r.referred_type,
        "referredName": r.referred_name,
        "referredPhone": r.referred_phone,
        "referredCustomerId": r.referred_customer_id,
        "referredPartnerId": r.referred_partner_id,
        "referralCode": r.referral_code,
        "status": r.status,
        "rewardAmount": r.reward_amount,
        "convertedAt": iso(r.converted_at),
        "createdAt": iso(r.created_at),
    }


@router.get("/code")
async def my_referral_code(
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    """Return the partner's referral code, generating it on first use."""
    return {"referralCode": await referrals.get_or_create_referral_code(db, partner)}


@router.get("")
async def list_referrals(
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Referral).where(Referral.referrer_id == partner.id).order_by(Referral.created_at.desc())
    )
    return [_referral_to_response(r) for r in result.scalars().all()]


@router.post("", status_code=201)
async def create_referral(
    body: ReferralCreate,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    try:
        referral = await referrals.create_referral(db, partner, body)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return _referral_to_response(referral)
