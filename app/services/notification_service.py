"""Notification reads and read-marking for the recipient."""
import logging

from sqlalchemy import update, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.errors import NotAuthenticated, failure
from app.models import Notification
from app.schemas import ActionResult, NotificationResponse

logger = logging.getLogger(__name__)


async def get_notifications(db: AsyncSession, actor_id: int) -> list[NotificationResponse]:
    """Notifications addressed to *actor_id*, most recent first."""
    q = (
        select(Notification)
        .where(Notification.user_id == actor_id)
        .options(joinedload(Notification.creator))
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    return [NotificationResponse.model_validate(n) for n in result.unique().scalars().all()]


async def mark_notifications_read(
    db: AsyncSession,
    actor_id: int | None,
    notification_ids: list[int],
) -> ActionResult:
    """Mark the given notifications read; ids addressed to other users are ignored."""
    try:
        if actor_id is None:
            raise NotAuthenticated()
        if notification_ids:
            async with db.begin_nested():
                await db.execute(
                    update(Notification)
                    .where(
                        Notification.user_id == actor_id,
                        Notification.id.in_(notification_ids),
                    )
                    .values(read=True)
                    .execution_options(synchronize_session=False)
                )
    except Exception as exc:
        return ActionResult(**failure(exc, "Failed to mark notifications as read", logger))
    return ActionResult(success=True)
