"""
Like service — toggle a user's like on a post.

The (user, post) primary key on ``likes`` is what keeps a like a clean
boolean.  The toggle is a keyed delete followed, when nothing was
deleted, by an insert; a second request racing us to the insert loses on
the primary key and its savepoint is rolled back instead of surfacing a
duplicate-key fault.
"""
import logging

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import cache
from app.config import settings
from app.errors import NotAuthenticated, failure
from app.models import Like, Notification, NotificationType
from app.schemas import LikeResult
from app.services.post_service import get_post_author_id

logger = logging.getLogger(__name__)


async def _remove_like(db: AsyncSession, user_id: int, post_id: int) -> bool:
    """Delete the like if present; True when a row was removed."""
    async with db.begin_nested():
        result = await db.execute(
            delete(Like).where(Like.user_id == user_id, Like.post_id == post_id)
        )
    return result.rowcount > 0


async def _like_exists(db: AsyncSession, user_id: int, post_id: int) -> bool:
    result = await db.execute(
        select(Like.user_id).where(Like.user_id == user_id, Like.post_id == post_id)
    )
    return result.scalar_one_or_none() is not None


async def _add_like(db: AsyncSession, user_id: int, post_id: int, author_id: int) -> None:
    """
    Insert the like and, on someone else's post, its LIKE notification.

    Both rows share one savepoint: either both persist or neither does.
    """
    try:
        async with db.begin_nested():
            await db.execute(insert(Like).values(user_id=user_id, post_id=post_id))
            if author_id != user_id:
                db.add(
                    Notification(
                        type=NotificationType.LIKE,
                        user_id=author_id,
                        creator_id=user_id,
                        post_id=post_id,
                    )
                )
                await db.flush()
    except IntegrityError:
        # Lost the race to a concurrent toggle: the like is there already.
        if not await _like_exists(db, user_id, post_id):
            raise
        logger.info("Like (%s, %s) was recorded by a concurrent request", user_id, post_id)


async def toggle_like(db: AsyncSession, actor_id: int | None, post_id: int) -> LikeResult:
    """
    Flip *actor_id*'s like on *post_id*.

    ``liked`` in the result is the state after the toggle.  Removing a
    like never touches notifications.
    """
    try:
        if actor_id is None:
            raise NotAuthenticated()
        author_id = await get_post_author_id(db, post_id)

        if await _remove_like(db, actor_id, post_id):
            liked = False
        else:
            await _add_like(db, actor_id, post_id, author_id)
            liked = True
    except Exception as exc:
        return LikeResult(**failure(exc, "Failed to toggle like", logger))

    await cache.revalidate_path(settings.HOME_PATH)
    logger.debug("User %s %s post %s", actor_id, "liked" if liked else "unliked", post_id)
    return LikeResult(success=True, liked=liked)
