from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
import logging

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    details=None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "ok": False,
            "code": code.value,
            "message": message,
            "details": jsonable_encoder(details),
        },
    )


# -------------------------
# APP EXCEPTIONS
# -------------------------
ERROR_CODE_TO_HTTP_STATUS = {
    ErrorCode.INSUFFICIENT_STOCK: 400,
    ErrorCode.INVALID_LOT_PRODUCT: 400,
    ErrorCode.INVALID_ORDER: 400,
    ErrorCode.INVALID_REFERENCE: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.PERMISSION_DENIED: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.ORDER_LOCKED: 409,
    ErrorCode.ORDER_LOCKED_FIELDS: 409,
    ErrorCode.DUPLICATE: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}


async def app_exception_handler(request: Request, exc: AppException):
    return error_response(
        ERROR_CODE_TO_HTTP_STATUS.get(exc.error_code, 400),
        exc.error_code,
        exc.message,
        exc.details,
    )


# -------------------------
# FASTAPI VALIDATION
# -------------------------
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
):
    return error_response(
        400,
        ErrorCode.VALIDATION_ERROR,
        "Invalid request data",
        exc.errors(),
    )


# -------------------------
# HTTP EXCEPTIONS (mapped)
# -------------------------
HTTP_STATUS_TO_ERROR_CODE = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.PERMISSION_DENIED,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.DUPLICATE,
    422: ErrorCode.VALIDATION_ERROR,
}


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
):
    error_code = HTTP_STATUS_TO_ERROR_CODE.get(
        exc.status_code,
        ErrorCode.INTERNAL_ERROR,
    )
    return error_response(exc.status_code, error_code, str(exc.detail))


# -------------------------
# DB INTEGRITY ERRORS
# -------------------------
FOREIGN_KEY_SQLSTATE = "23503"
UNIQUE_SQLSTATE = "23505"


def classify_integrity_error(exc: IntegrityError) -> ErrorCode:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == FOREIGN_KEY_SQLSTATE:
        return ErrorCode.INVALID_REFERENCE
    if sqlstate == UNIQUE_SQLSTATE:
        return ErrorCode.DUPLICATE

    text = str(orig).lower()
    if "foreign key" in text:
        return ErrorCode.INVALID_REFERENCE
    if "unique" in text or "duplicate" in text:
        return ErrorCode.DUPLICATE
    return ErrorCode.INVALID_REFERENCE


async def integrity_error_handler(
    request: Request, exc: IntegrityError
):
    code = classify_integrity_error(exc)
    logger.warning(
        "DB integrity error on %s %s: %s",
        request.method,
        request.url.path,
        code.value,
    )

    if code == ErrorCode.DUPLICATE:
        return error_response(409, code, "Duplicate record")
    return error_response(400, code, "Invalid reference")


# -------------------------
# LAST RESORT
# -------------------------
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )
    return error_response(
        500,
        ErrorCode.INTERNAL_ERROR,
        "Something went wrong. Please try again.",
    )
