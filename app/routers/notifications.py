from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import get_current_user_id
from app.errors import status_for
from app.schemas import ActionResult, MarkReadRequest, NotificationResponse
from app.services import notification_service

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])

@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    actor_id: int | None = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    if actor_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return await notification_service.get_notifications(db, actor_id)

@router.post("/read", response_model=ActionResult)
async def mark_read(
    data: MarkReadRequest,
    response: Response,
    actor_id: int | None = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await notification_service.mark_notifications_read(db, actor_id, data.notification_ids)
    response.status_code = status_for(result)
    return result
