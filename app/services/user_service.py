"""
User service — the accounts bearer tokens resolve to.

Users are fetched without caching; the profile page reads go through
``profile_service`` instead.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User
from app.schemas import UserCreate


def _user_to_dict(user: User) -> dict:
    """Serialise a User ORM instance to a plain dict."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "name": user.name,
        "image": user.image,
        "bio": user.bio,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


async def get_user(db: AsyncSession, user_id: int) -> dict | None:
    """Return *user_id* as a dict, or None when the user does not exist."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        return None
    return _user_to_dict(user)


async def create_user(db: AsyncSession, data: UserCreate) -> dict:
    """
    Create a new user and return its serialised dict.

    Username and email uniqueness is enforced by the database; the router
    translates the resulting ``IntegrityError`` into a 409.
    """
    user = User(
        username=data.username,
        email=data.email,
        name=data.name,
        image=data.image,
        bio=data.bio,
    )
    db.add(user)
    await db.flush()
    return _user_to_dict(user)
