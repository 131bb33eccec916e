# app/constants/order_log_templates.py

from enum import Enum


class OrderLogAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    STATUS_CHANGE = "status_change"

    # inbound milestones
    SUBMIT = "submit"
    ARRIVE = "arrive"
    RECEIVE = "receive"

    # outbound milestones
    ALLOCATE = "allocate"
    PACK = "pack"
    SHIP = "ship"

    CANCEL = "cancel"

    # item level
    ITEM_CREATE = "item_create"
    ITEM_UPDATE = "item_update"
    ITEM_MOVE_OUT = "item_move_out"
    ITEM_MOVE_IN = "item_move_in"
    ITEM_DELETE = "item_delete"


ORDER_LOG_TEMPLATES = {
    # ---------------- ORDER ----------------
    OrderLogAction.CREATE:
        "Created {order_kind} order {order_no}",
    OrderLogAction.UPDATE:
        "{order_kind_title} order updated",
    OrderLogAction.DELETE:
        "{order_kind_title} order deleted",
    OrderLogAction.STATUS_CHANGE:
        "{from_status} -> {to_status}",

    # ---------------- ITEMS ----------------
    OrderLogAction.ITEM_CREATE:
        "Item added (product={product_id}, lot={lot_id}, qty={qty}{extra})",
    OrderLogAction.ITEM_UPDATE:
        "Item updated (item={item_id}, qty {old_qty} -> {qty}{extra})",
    OrderLogAction.ITEM_MOVE_OUT:
        "Item moved out to {order_kind}_order_id={target_order_id} (item={item_id}, qty={qty})",
    OrderLogAction.ITEM_MOVE_IN:
        "Item moved in from {order_kind}_order_id={source_order_id} (item={item_id}, qty={qty})",
    OrderLogAction.ITEM_DELETE:
        "Item deleted (item={item_id}, product={product_id}, lot={lot_id}, qty={qty})",
}

# Milestone actions share the status-change note.
for _action in (
    OrderLogAction.SUBMIT,
    OrderLogAction.ARRIVE,
    OrderLogAction.RECEIVE,
    OrderLogAction.ALLOCATE,
    OrderLogAction.PACK,
    OrderLogAction.SHIP,
    OrderLogAction.CANCEL,
):
    ORDER_LOG_TEMPLATES[_action] = ORDER_LOG_TEMPLATES[OrderLogAction.STATUS_CHANGE]
