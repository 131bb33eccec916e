# app/core/security.py

from jose import jwt, JWTError

from app.constants.error_codes import ErrorCode
from app.core.config import JWT_ACCESS_SECRET_KEY, JWT_ALGORITHM
from app.core.exceptions import AppException


# =====================================================
# DECODE + VALIDATE TOKEN
# =====================================================
def decode_access_token(token: str) -> dict:
    """Verify a bearer token issued by the auth service and return its claims."""
    try:
        payload = jwt.decode(
            token,
            JWT_ACCESS_SECRET_KEY,
            algorithms=[JWT_ALGORITHM],
        )
    except JWTError:
        raise AppException(ErrorCode.UNAUTHORIZED, "Invalid or expired token")

    token_type = payload.get("type")
    if token_type is not None and token_type != "access":
        raise AppException(ErrorCode.UNAUTHORIZED, "Invalid token type")

    return payload
