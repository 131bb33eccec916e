# app/constants/error_codes.py

from enum import Enum


class ErrorCode(str, Enum):
    # ---- ledger / order rules ----
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INVALID_LOT_PRODUCT = "INVALID_LOT_PRODUCT"
    INVALID_ORDER = "INVALID_ORDER"
    ORDER_LOCKED = "ORDER_LOCKED"
    ORDER_LOCKED_FIELDS = "ORDER_LOCKED_FIELDS"

    # ---- generic ----
    NOT_FOUND = "NOT_FOUND"
    INVALID_REFERENCE = "INVALID_REFERENCE"
    DUPLICATE = "DUPLICATE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
