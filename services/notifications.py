from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models import Notification

logger = logging.getLogger(__name__)


async def notify(
    session: AsyncSession,
    user_id: Optional[str],
    title: str,
    message: str,
    type: str = "info",
    link: Optional[str] = None,
) -> Optional[Notification]:
    """Queue an in-app notification in the current unit of work. No-op without a recipient."""
    if not user_id:
        return None
    note = Notification(
        id=f"ntf-{uuid.uuid4().hex[:12]}",
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        link=link,
        is_read=False,
    )
    session.add(note)
    logger.debug("Notification for %s: %s", user_id, title)
    return note


async def unread_count(session: AsyncSession, user_id: str) -> int:
    result = await session.execute(
        select(func.count(Notification.id)).where(Notification.user_id == user_id, Notification.is_read.is_(False))
    )
    return int(result.scalar_one())


async def mark_all_read(session: AsyncSession, user_id: str) -> int:
    result = await session.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    return result.rowcount or 0
