"""
Comment service — append-only comment creation for posts.

Comments cannot be edited or deleted here.  A comment on someone else's
post is written together with a COMMENT notification that points at the
new comment, so the comment row is flushed first to obtain its id.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import cache
from app.config import settings
from app.errors import InvalidContent, NotAuthenticated, failure
from app.models import Comment, Notification, NotificationType, User
from app.schemas import AuthorSummary, CommentResponse, CommentResult
from app.services.post_service import get_post_author_id

logger = logging.getLogger(__name__)


async def create_comment(
    db: AsyncSession,
    actor_id: int | None,
    post_id: int,
    content: str,
) -> CommentResult:
    """
    Add *actor_id*'s comment to *post_id*.

    Blank (empty or whitespace-only) content is rejected before the post
    is looked up, so it never writes a comment or a notification.
    """
    try:
        if actor_id is None:
            raise NotAuthenticated()
        if not content or not content.strip():
            raise InvalidContent()
        author_id = await get_post_author_id(db, post_id)

        async with db.begin_nested():
            comment = Comment(content=content, author_id=actor_id, post_id=post_id)
            db.add(comment)
            await db.flush()

            if author_id != actor_id:
                db.add(
                    Notification(
                        type=NotificationType.COMMENT,
                        user_id=author_id,
                        creator_id=actor_id,
                        post_id=post_id,
                        comment_id=comment.id,
                    )
                )
                await db.flush()

        actor = await db.get(User, actor_id)
    except Exception as exc:
        return CommentResult(**failure(exc, "Failed to create comment", logger))

    await cache.revalidate_path(settings.HOME_PATH)
    logger.info("User %s commented on post %s", actor_id, post_id)
    return CommentResult(
        success=True,
        comment=CommentResponse(
            id=comment.id,
            content=comment.content,
            author_id=comment.author_id,
            post_id=comment.post_id,
            created_at=comment.created_at,
            author=AuthorSummary.model_validate(actor) if actor else None,
        ),
    )
