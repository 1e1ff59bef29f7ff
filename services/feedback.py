from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Feedback, Partner
from models.enums import FeedbackStatus
from schemas.feedback import FeedbackCreate
from services.errors import NotFound

logger = logging.getLogger(__name__)


async def submit_feedback(session: AsyncSession, body: FeedbackCreate, user: Optional[Partner] = None) -> Feedback:
    """Store feedback from a signed-in partner or, with no user, from the public site."""
    feedback = Feedback(
        id=f"fbk-{uuid.uuid4().hex[:12]}",
        user_id=user.id if user else None,
        name=body.name or (user.name if user else None),
        email=body.email or (user.email if user else None),
        type=body.type.value,
        subject=body.subject,
        message=body.message,
        status=FeedbackStatus.PENDING.value,
    )
    session.add(feedback)
    await session.flush()
    logger.info("Feedback %s (%s) from %s", feedback.id, feedback.type, user.id if user else "public")
    return feedback


async def list_feedback(
    session: AsyncSession,
    user_id: Optional[str] = None,
    status: Optional[str] = None,
) -> list[Feedback]:
    stmt = select(Feedback).order_by(Feedback.created_at.desc())
    if user_id:
        stmt = stmt.where(Feedback.user_id == user_id)
    if status:
        stmt = stmt.where(Feedback.status == status)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_feedback_status(
    session: AsyncSession, feedback_id: str, status: str, admin_notes: Optional[str] = None
) -> Feedback:
    feedback = await session.get(Feedback, feedback_id)
    if feedback is None:
        raise NotFound("Feedback")
    feedback.status = FeedbackStatus(status).value
    if admin_notes is not None:
        feedback.admin_notes = admin_notes
    await session.flush()
    return feedback
