# app/constants/billing.py

from enum import Enum


class BillingReferenceType(str, Enum):
    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"


class ServiceCode(str, Enum):
    INBOUND_FEE = "INBOUND_FEE"
    OUTBOUND_FEE = "OUTBOUND_FEE"


class PricingPolicy(str, Enum):
    KRW_FIXED = "KRW_FIXED"
    THB_BASED = "THB_BASED"


OUTBOUND_SHIP_SERVICE = "OUTBOUND_SHIP"
