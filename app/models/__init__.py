# Users
from app.models.users.user_models import User

# Masters
from app.models.masters.client_models import Client
from app.models.masters.warehouse_models import Warehouse, WarehouseLocation
from app.models.masters.product_models import Product, ProductLot

# Inventory
from app.models.inventory.stock_balance_models import StockBalance
from app.models.inventory.stock_transaction_models import StockTransaction
from app.models.inventory.storage_snapshot_models import StorageSnapshot

# Orders
from app.models.orders.inbound_order_models import InboundOrder, InboundItem
from app.models.orders.outbound_order_models import OutboundOrder, OutboundItem
from app.models.orders.outbound_box_models import OutboundBox
from app.models.orders.order_log_models import InboundOrderLog, OutboundOrderLog

# Billing
from app.models.billing.billing_event_models import BillingEvent
from app.models.billing.service_event_models import ServiceEvent
