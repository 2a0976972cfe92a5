"""
Post service — create, list and delete posts.

Design notes
------------
- Mutations return a result envelope (``PostResult`` / ``ActionResult``)
  and never raise; failures are logged and folded into the envelope by
  ``app.errors.failure``.  The feed read follows the same discipline.
- Writes run inside ``begin_nested()`` so a failed statement rolls back
  only its own unit and leaves the request session usable; the outer
  transaction is committed by ``get_db``.
- Eager loading (``joinedload`` for authors, ``selectinload`` for the
  comment and like collections) keeps the feed at a fixed number of
  queries regardless of its length.
- The home route is revalidated after every successful write.
"""
import logging

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from app.cache import cache, page_key
from app.config import settings
from app.errors import NotAuthenticated, NotPostAuthor, PostNotFound, failure
from app.models import Comment, Post
from app.schemas import (
    ActionResult,
    AuthorSummary,
    CommentResponse,
    FeedResult,
    LikeResponse,
    PostDetail,
    PostResult,
    PostSummary,
)

logger = logging.getLogger(__name__)

FEED_CACHE_NAME = "posts"


# ---------------------------------------------------------------------------
# Query / serialisation helpers (shared with profile_service)
# ---------------------------------------------------------------------------

def detail_query() -> Select:
    """SELECT for posts with author, comments (with authors) and likes loaded."""
    # populate_existing: posts already in the session get their collections
    # reloaded instead of keeping what an earlier read saw.
    return (
        select(Post)
        .options(
            joinedload(Post.author),
            selectinload(Post.comments).joinedload(Comment.author),
            selectinload(Post.likes),
        )
        .execution_options(populate_existing=True)
    )


def newest_first(query: Select) -> Select:
    return query.order_by(Post.created_at.desc(), Post.id.desc())


def to_detail(post: Post) -> PostDetail:
    return PostDetail(
        id=post.id,
        content=post.content,
        image=post.image,
        created_at=post.created_at,
        author_id=post.author_id,
        author=AuthorSummary.model_validate(post.author),
        comments=[CommentResponse.model_validate(c) for c in post.comments],
        likes=[LikeResponse.model_validate(like) for like in post.likes],
        like_count=len(post.likes),
    )


async def get_post_author_id(db: AsyncSession, post_id: int) -> int:
    """Return the author of *post_id*, raising ``PostNotFound`` if it is gone."""
    result = await db.execute(select(Post.author_id).where(Post.id == post_id))
    author_id = result.scalar_one_or_none()
    if author_id is None:
        raise PostNotFound()
    return author_id


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def create_post(
    db: AsyncSession,
    actor_id: int | None,
    content: str,
    image: str | None = None,
) -> PostResult:
    """
    Publish a post authored by *actor_id*.

    Content and image are stored exactly as given.
    """
    try:
        if actor_id is None:
            raise NotAuthenticated()

        async with db.begin_nested():
            post = Post(content=content, image=image, author_id=actor_id)
            db.add(post)
            await db.flush()
    except Exception as exc:
        return PostResult(**failure(exc, "Failed to create post", logger))

    await cache.revalidate_path(settings.HOME_PATH)
    logger.info("User %s created post %s", actor_id, post.id)
    return PostResult(success=True, post=PostSummary.model_validate(post))


async def get_posts(db: AsyncSession) -> FeedResult:
    """
    Return every post newest first, each with its author, its comments
    oldest first, its likes and the like count.

    Successful results are cached under the home route until the next
    revalidation.
    """
    cache_key = page_key(settings.HOME_PATH, FEED_CACHE_NAME)
    cached = await cache.get(cache_key)
    if cached:
        return FeedResult(**cached)

    try:
        result = await db.execute(newest_first(detail_query()))
        posts = [to_detail(p) for p in result.unique().scalars().all()]
    except Exception as exc:
        return FeedResult(**failure(exc, "Failed to fetch posts", logger))

    response = FeedResult(success=True, posts=posts)
    await cache.set(cache_key, response.model_dump(mode="json"), ttl=settings.CACHE_TTL_FEED)
    return response


async def delete_post(db: AsyncSession, actor_id: int | None, post_id: int) -> ActionResult:
    """
    Delete *post_id* if *actor_id* wrote it.

    Comments, likes and notifications on the post go with it through the
    ``ON DELETE CASCADE`` foreign keys.
    """
    try:
        if actor_id is None:
            raise NotAuthenticated()
        author_id = await get_post_author_id(db, post_id)
        if author_id != actor_id:
            raise NotPostAuthor()

        async with db.begin_nested():
            await db.execute(delete(Post).where(Post.id == post_id))
    except Exception as exc:
        return ActionResult(**failure(exc, "Failed to delete post", logger))

    await cache.revalidate_path(settings.HOME_PATH)
    logger.info("User %s deleted post %s", actor_id, post_id)
    return ActionResult(success=True)
