from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.customers import milestone_to_response
from api.deps import http_error, load_customer, require_roles
from database import get_db
from models import Milestone, Partner
from models.enums import Role
from schemas.milestone import MilestoneComplete
from services import journey
from services.errors import SERVICE_ERRORS

router = APIRouter(prefix="/api/milestones", tags=["milestones"])

_staff = require_roles(Role.ADMIN, Role.BDP, Role.DDP)


async def _load_for(db: AsyncSession, milestone_id: str, partner: Partner) -> Milestone:
    milestone = await db.get(Milestone, milestone_id)
    if not milestone:
        raise HTTPException(status_code=404, detail="Milestone not found")
    await load_customer(db, milestone.customer_id, partner)
    return milestone


@router.patch("/{milestone_id}/complete")
async def complete_milestone(
    milestone_id: str,
    body: Optional[MilestoneComplete] = None,
    partner: Partner = Depends(_staff),
    db: AsyncSession = Depends(get_db),
):
    """
    Complete a milestone. On file submission (and bank loan processing) a vendorId
    assigns that vendor in the same transaction; if the assignment is rejected the
    milestone stays as it was.
    """
    body = body or MilestoneComplete()
    await _load_for(db, milestone_id, partner)
    try:
        milestone = await journey.complete_milestone(
            db, milestone_id, notes=body.notes, vendor_id=body.vendor_id, actor=partner
        )
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return milestone_to_response(milestone)


@router.patch("/{milestone_id}/start")
async def start_milestone(
    milestone_id: str,
    partner: Partner = Depends(_staff),
    db: AsyncSession = Depends(get_db),
):
    await _load_for(db, milestone_id, partner)
    try:
        milestone = await journey.start_milestone(db, milestone_id)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return milestone_to_response(milestone)
