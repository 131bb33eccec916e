from fastapi import Depends

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.utils.get_user import get_current_user
from app.models.users.user_models import User


def require_role(roles: list[str]):
    async def role_checker(user: User = Depends(get_current_user)):
        if user.role.lower() not in [r.lower() for r in roles]:
            raise AppException(ErrorCode.PERMISSION_DENIED, "Permission denied")
        return user
    return role_checker
