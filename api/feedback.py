from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_partner, http_error, require_roles
from database import get_db
from models import Feedback, Partner
from models.enums import Role
from schemas.feedback import FeedbackCreate, FeedbackStatusUpdate
from services import feedback as feedback_service
from services.errors import SERVICE_ERRORS
from utils.case import iso

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


def feedback_to_response(f: Feedback) -> dict[str, Any]:
    return {
        "id": f.id,
        "userId": f.user_id,
        "name": f.name,
        "email": f.email,
        "type": f.type,
        "subject": f.subject,
        "message": f.message,
        "status": f.status,
        "adminNotes": f.admin_notes,
        "createdAt": iso(f.created_at),
    }


@router.post("", status_code=201)
async def submit_feedback(
    body: FeedbackCreate,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    feedback = await feedback_service.submit_feedback(db, body, user=partner)
    return feedback_to_response(feedback)


@router.get("")
async def list_feedback(
    status: Optional[str] = None,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    """Own feedback; admins see all of it."""
    user_id = None if partner.role == Role.ADMIN.value else partner.id
    rows = await feedback_service.list_feedback(db, user_id=user_id, status=status)
    return [feedback_to_response(f) for f in rows]


@router.patch("/{feedback_id}/status")
async def update_feedback_status(
    feedback_id: str,
    body: FeedbackStatusUpdate,
    _: Partner = Depends(require_roles(Role.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    try:
        feedback = await feedback_service.update_feedback_status(
            db, feedback_id, body.status.value, body.admin_notes
        )
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return feedback_to_response(feedback)
