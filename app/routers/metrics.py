from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models import Comment, Like, Notification, Post, User
from app.schemas import MetricsResponse
from app.cache import cache

router = APIRouter(prefix="/api/v1/metrics", tags=["metrics"])

async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()

@router.get("", response_model=MetricsResponse)
async def get_metrics(db: AsyncSession = Depends(get_db)):
    return MetricsResponse(
        total_posts=await _count(db, Post),
        total_comments=await _count(db, Comment),
        total_likes=await _count(db, Like),
        total_users=await _count(db, User),
        total_notifications=await _count(db, Notification),
        cache_info=cache.stats,
    )
