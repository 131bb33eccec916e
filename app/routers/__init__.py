# app/routers/__init__.py

from .health.health_router import router as health_router

from .orders.inbound_order_router import router as inbound_order_router
from .orders.inbound_item_router import router as inbound_item_router
from .orders.outbound_order_router import router as outbound_order_router
from .orders.outbound_item_router import router as outbound_item_router

from .inventory.stock_router import balance_router as stock_balance_router
from .inventory.stock_router import transaction_router as stock_transaction_router
from .inventory.storage_snapshot_router import router as storage_snapshot_router

from .billing.billing_event_router import router as billing_event_router
from .billing.billing_event_router import service_event_router


__all__ = [
"health_router",

"inbound_order_router",
"inbound_item_router",
"outbound_order_router",
"outbound_item_router",

"stock_balance_router",
"stock_transaction_router",
"storage_snapshot_router",

"billing_event_router",
"service_event_router",
]
