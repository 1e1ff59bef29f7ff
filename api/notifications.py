from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_partner
from database import get_db
from models import Notification, Partner
from services import notifications
from utils.case import iso

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _notification_to_response(n: Notification) -> dict:
    return {
        "id": n.id,
        "title": n.title,
        "message": n.message,
        "type": n.type,
        "link": n.link,
        "isRead": n.is_read,
        "createdAt": iso(n.created_at),
    }


@router.get("")
async def list_notifications(
    unread_only: bool = False,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Notification).where(Notification.user_id == partner.id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    result = await db.execute(stmt.order_by(Notification.created_at.desc()).limit(100))
    return [_notification_to_response(n) for n in result.scalars().all()]


@router.get("/unread-count")
async def unread_count(
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    return {"count": await notifications.unread_count(db, partner.id)}


@router.patch("/read-all")
async def mark_all_read(
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    return {"updated": await notifications.mark_all_read(db, partner.id)}


@router.patch("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    note = await db.get(Notification, notification_id)
    if note is None or note.user_id != partner.id:
        raise HTTPException(status_code=404, detail="Notification not found")
    note.is_read = True
    await db.flush()
    return _notification_to_response(note)
