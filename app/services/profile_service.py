"""
Profile service — the reads behind a user's profile page.

These are plain reads: they return values (or None for an unknown
username) and leave database faults to the request's error handling.
"""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Follow, Like, Post, User
from app.schemas import PostDetail, ProfileCounts, ProfileResponse
from app.services.post_service import detail_query, newest_first, to_detail


async def _count(db: AsyncSession, query) -> int:
    return (await db.execute(query)).scalar_one()


async def get_profile_by_username(db: AsyncSession, username: str) -> ProfileResponse | None:
    """Return the user called *username* with follower/following/post counts."""
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None:
        return None

    counts = ProfileCounts(
        followers=await _count(
            db, select(func.count()).select_from(Follow).where(Follow.following_id == user.id)
        ),
        following=await _count(
            db, select(func.count()).select_from(Follow).where(Follow.follower_id == user.id)
        ),
        posts=await _count(
            db, select(func.count()).select_from(Post).where(Post.author_id == user.id)
        ),
    )
    return ProfileResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        name=user.name,
        image=user.image,
        bio=user.bio,
        created_at=user.created_at,
        counts=counts,
    )


async def get_user_posts(db: AsyncSession, user_id: int) -> list[PostDetail]:
    """Posts written by *user_id*, newest first, in the feed's shape."""
    result = await db.execute(newest_first(detail_query().where(Post.author_id == user_id)))
    return [to_detail(p) for p in result.unique().scalars().all()]


async def get_user_liked_posts(db: AsyncSession, user_id: int) -> list[PostDetail]:
    """Posts *user_id* has liked, newest post first."""
    liked_ids = select(Like.post_id).where(Like.user_id == user_id)
    result = await db.execute(newest_first(detail_query().where(Post.id.in_(liked_ids))))
    return [to_detail(p) for p in result.unique().scalars().all()]


async def is_following(db: AsyncSession, actor_id: int | None, user_id: int) -> bool:
    """Whether *actor_id* follows *user_id*; an anonymous actor follows nobody."""
    if actor_id is None:
        return False
    result = await db.execute(
        select(Follow.follower_id).where(
            Follow.follower_id == actor_id, Follow.following_id == user_id
        )
    )
    return result.scalar_one_or_none() is not None
