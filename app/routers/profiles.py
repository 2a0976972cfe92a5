from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import get_current_user_id
from app.schemas import ProfilePage
from app.services import profile_service

router = APIRouter(prefix="/api/v1/profiles", tags=["profiles"])

@router.get("/{username}", response_model=ProfilePage)
async def get_profile(
    username: str,
    actor_id: int | None = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    user = await profile_service.get_profile_by_username(db, username)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    # One session per request, so the reads run one after another.
    return ProfilePage(
        user=user,
        posts=await profile_service.get_user_posts(db, user.id),
        liked_posts=await profile_service.get_user_liked_posts(db, user.id),
        is_following=await profile_service.is_following(db, actor_id, user.id),
    )
