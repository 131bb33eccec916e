from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.constants.error_codes import ErrorCode
from app.core.db import get_db
from app.core.exceptions import AppException
from app.core.security import decode_access_token
from app.models.users.user_models import User
from app.utils.logger import get_logger

logger = get_logger("auth.guard")


async def get_current_user(
    request: Request,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        logger.warning("Missing bearer token")
        raise AppException(ErrorCode.UNAUTHORIZED, "Invalid authorization header")

    token = authorization.split("Bearer ")[1].strip()
    payload = decode_access_token(token)

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AppException(ErrorCode.UNAUTHORIZED, "Invalid token subject")

    user = await db.get(User, user_id)

    if not user:
        logger.warning("Token user not found", extra={"user_id": user_id})
        raise AppException(ErrorCode.UNAUTHORIZED, "User not found")

    if not user.is_active:
        logger.warning("Inactive user access blocked", extra={"user_id": user.id})
        raise AppException(ErrorCode.PERMISSION_DENIED, "User account is inactive")

    request.state.user = user
    return user


def resolve_actor_user_id(user: User | None, fallback_user_id: int | None) -> int | None:
    """Audit actor: the authenticated user, else the order's creator."""
    if user is not None and user.id and user.id > 0:
        return user.id
    if fallback_user_id and fallback_user_id > 0:
        return fallback_user_id
    return None
