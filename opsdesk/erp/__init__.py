"""Legacy JD Edwards connector: codec, pooled access, fallback queries, tagged results."""

from .connection import ConnectionManager
from .connector import ErpConnector, get_connector
from .errors import ErpConnectionError, ErpError, MappingError, QueryError, SyncError
from .records import (
    ConnectionConfig,
    InventoryLevel,
    ItemLocation,
    ItemMaster,
    MrpMessage,
    PurchaseOrderDetail,
    PurchaseOrderHeader,
    ReceiptDetail,
    SalesOrderDetail,
    StockStatus,
    SupplierInfo,
)
from .results import QueryResult, ResultKind

__all__ = [
    "ConnectionConfig",
    "ConnectionManager",
    "ErpConnectionError",
    "ErpConnector",
    "ErpError",
    "InventoryLevel",
    "ItemLocation",
    "ItemMaster",
    "MappingError",
    "MrpMessage",
    "PurchaseOrderDetail",
    "PurchaseOrderHeader",
    "QueryError",
    "QueryResult",
    "ReceiptDetail",
    "ResultKind",
    "SalesOrderDetail",
    "StockStatus",
    "SupplierInfo",
    "SyncError",
    "get_connector",
]
