# app/constants/stock.py

from enum import Enum


class StockTxnType(str, Enum):
    INBOUND_RECEIVE = "inbound_receive"
    OUTBOUND_SHIP = "outbound_ship"
    RETURN_RECEIVE = "return_receive"


class StockRefType(str, Enum):
    INBOUND_ITEM = "inbound_item"
    OUTBOUND_ITEM = "outbound_item"
    RETURN_ITEM = "return_item"
