from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import get_current_user_id
from app.errors import status_for
from app.schemas import (
    ActionResult,
    CommentCreate,
    CommentResult,
    FeedResult,
    LikeResult,
    PostCreate,
    PostResult,
)
from app.services import comment_service, like_service, post_service

router = APIRouter(prefix="/api/v1/posts", tags=["posts"])

@router.get("", response_model=FeedResult)
async def list_posts(response: Response, db: AsyncSession = Depends(get_db)):
    result = await post_service.get_posts(db)
    response.status_code = status_for(result)
    return result

@router.post("", response_model=PostResult, status_code=201)
async def create_post(
    data: PostCreate,
    response: Response,
    actor_id: int | None = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await post_service.create_post(db, actor_id, data.content, data.image)
    response.status_code = status_for(result, ok=201)
    return result

@router.delete("/{post_id}", response_model=ActionResult)
async def delete_post(
    post_id: int,
    response: Response,
    actor_id: int | None = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await post_service.delete_post(db, actor_id, post_id)
    response.status_code = status_for(result)
    return result

@router.post("/{post_id}/like", response_model=LikeResult)
async def toggle_like(
    post_id: int,
    response: Response,
    actor_id: int | None = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await like_service.toggle_like(db, actor_id, post_id)
    response.status_code = status_for(result)
    return result

@router.post("/{post_id}/comments", response_model=CommentResult, status_code=201)
async def create_comment(
    post_id: int,
    data: CommentCreate,
    response: Response,
    actor_id: int | None = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await comment_service.create_comment(db, actor_id, post_id, data.content)
    response.status_code = status_for(result, ok=201)
    return result
