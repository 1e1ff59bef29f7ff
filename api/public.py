"""
Endpoints reachable without a partner identity: website customer sign-up,
vendor registration, referral code lookup, customer-partner enrolment and
anonymous feedback.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.customers import customer_to_response
from api.deps import http_error
from api.feedback import feedback_to_response
from api.partners import partner_to_response
from api.vendors import vendor_to_response
from database import get_db
from models.enums import CustomerSource
from schemas.customer import PublicCustomerRegistration
from schemas.feedback import FeedbackCreate
from schemas.partner import CustomerPartnerEnrollment
from schemas.vendor import VendorRegistration
from services import customers, feedback, partners, referrals, vendors
from services.errors import SERVICE_ERRORS

router = APIRouter(prefix="/api/public", tags=["public"])


@router.post("/customer-registration", status_code=201)
async def register_customer(body: PublicCustomerRegistration, db: AsyncSession = Depends(get_db)):
    """A valid customer-partner code makes this a referral; anything else is a direct sign-up."""
    referrer = await referrals.customer_partner_for_code(db, body.referral_code)
    source = CustomerSource.CUSTOMER_REFERRAL if referrer else CustomerSource.WEBSITE_DIRECT
    customer = await customers.create_customer(db, body, source=source, referrer=referrer)
    return customer_to_response(customer)


@router.post("/vendor-registration", status_code=201)
async def register_vendor(body: VendorRegistration, db: AsyncSession = Depends(get_db)):
    vendor = await vendors.register_vendor(db, body)
    return vendor_to_response(vendor)


@router.get("/referrals/{code}")
async def validate_referral_code(code: str, db: AsyncSession = Depends(get_db)):
    partner = await referrals.partner_by_referral_code(db, code)
    if partner is None:
        return {"valid": False}
    return {"valid": True, "referrerName": partner.name, "referrerRole": partner.role}


@router.post("/customer-partner/register", status_code=201)
async def enroll_customer_partner(body: CustomerPartnerEnrollment, db: AsyncSession = Depends(get_db)):
    try:
        partner = await partners.enroll_customer_partner(db, body)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return partner_to_response(partner)


@router.post("/feedback", status_code=201)
async def submit_feedback(body: FeedbackCreate, db: AsyncSession = Depends(get_db)):
    return feedback_to_response(await feedback.submit_feedback(db, body))
