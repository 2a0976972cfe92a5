import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import User
from app.security import decode_token

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> int | None:
    """
    Resolve the request's bearer token to an internal user id.

    Returns None instead of raising when there is no token, the token is
    invalid or expired, or the user it names no longer exists.  Services
    decide what an anonymous actor is allowed to do.
    """
    if credentials is None:
        return None
    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type") != "access":
        logger.debug("Rejected bearer token")
        return None
    try:
        user_id = int(payload.get("sub", ""))
    except (TypeError, ValueError):
        return None
    result = await db.execute(select(User.id).where(User.id == user_id))
    return result.scalar_one_or_none()
