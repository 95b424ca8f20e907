"""Immutable domain records produced by the ERP connector.

Field names are the application's; the legacy column each one is decoded
from is noted beside it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from .codec import LineStatus, OrderStatus


class StockStatus(str, Enum):
    OUT = "OUT"
    LOW = "LOW"
    OK = "OK"


LOW_STOCK_THRESHOLD = 10


def derive_stock_status(available_stock) -> StockStatus:
    if available_stock <= 0:
        return StockStatus.OUT
    if available_stock < LOW_STOCK_THRESHOLD:
        return StockStatus.LOW
    return StockStatus.OK


class _Record:
    def as_dict(self) -> dict:
        payload = asdict(self)  # type: ignore[call-overload]
        for key, value in payload.items():
            if isinstance(value, Enum):
                payload[key] = value.value
        return payload


@dataclass(frozen=True)
class ConnectionConfig:
    host: str
    port: int
    service_name: str
    user: str
    password: str = field(repr=False)
    environment: str = "development"
    # AIS REST endpoint; reserved, not used for queries
    ais_server: str = ""
    ais_port: int = 0
    ais_user: str = ""
    ais_password: str = field(default="", repr=False)
    # Full SQLAlchemy URL; wins over host/port/service when set
    url: str | None = None

    @classmethod
    def from_mapping(cls, cfg) -> "ConnectionConfig":
        """Build from a Flask config (or any mapping using the JDE_* keys)."""
        return cls(
            host=cfg.get("JDE_DB_HOST", "localhost"),
            port=int(cfg.get("JDE_DB_PORT", 1521)),
            service_name=cfg.get("JDE_DB_SERVICE", "JDE"),
            user=cfg.get("JDE_DB_USER", ""),
            password=cfg.get("JDE_DB_PASSWORD", ""),
            environment=cfg.get("ENVIRONMENT", "development"),
            ais_server=cfg.get("JDE_AIS_SERVER", ""),
            ais_port=int(cfg.get("JDE_AIS_PORT", 0) or 0),
            ais_user=cfg.get("JDE_AIS_USER", ""),
            ais_password=cfg.get("JDE_AIS_PASSWORD", ""),
            url=cfg.get("JDE_DATABASE_URL") or None,
        )


@dataclass(frozen=True)
class ItemMaster(_Record):
    item_number: str            # IMITM
    long_item_number: str       # IMLITM
    description: str            # IMDSC1 + IMDSC2
    item_type: str              # IMSTKT
    unit_of_measure: str        # IMUOM1
    purchasing_uom: str         # IMUOM3
    gl_class: str               # IMGLPT
    lead_time: int              # IMLTLV
    safety_stock: int           # IBSAFE
    min_order_qty: int          # IBROQN
    max_order_qty: int          # IBROQX
    lot_size: int               # IBROQI
    cost_center: str            # IMPRGR
    planner: str                # IMDSGP / IMANPL
    buyer: str                  # IMBUYR


@dataclass(frozen=True)
class ItemLocation(_Record):
    item_number: str            # LIITM
    branch: str                 # LIMCU
    location: str               # LILOCN
    on_hand: Decimal            # LIPQOH
    on_order: Decimal           # LIPREQ
    committed: Decimal          # LIHCOM + LISWSC
    last_count_date: date | None = None      # LILCDJ
    last_count_quantity: Decimal | None = None  # LILCQT


@dataclass(frozen=True)
class SupplierInfo(_Record):
    supplier_id: str            # ABAN8
    name: str                   # ABALPH
    address: str                # ABAT1..ABAT4


@dataclass(frozen=True)
class PurchaseOrderHeader(_Record):
    po_number: str              # PHDOCO
    supplier_id: str            # PHAN8
    supplier_name: str          # ABALPH
    supplier_address: str
    order_date: date            # PHTRDJ
    request_date: date | None   # PHDRQJ
    promise_date: date | None   # PHPDDJ
    status: OrderStatus         # PHDCTO through ORDER_STATUS
    total_base: Decimal         # PHOTOT / 100, always USD
    total_foreign: Decimal      # PHFAP, unscaled
    currency_code: str          # PHCRCD
    base_currency_code: str     # fixed USD for this deployment
    buyer: str                  # PHORBY
    business_unit: str          # PHMCU
    order_type: str             # PHDCTO
    line_item_count: int
    approver_name: str | None = None   # F0101 name of HORPER
    approver_id: str | None = None     # HORPER
    approval_route: str | None = None  # HOARTG

    @property
    def requires_approval(self) -> bool:
        return bool(self.approval_route)


@dataclass(frozen=True)
class PurchaseOrderDetail(_Record):
    po_number: str              # PDDOCO
    line_number: Decimal        # PDLNID / 1000
    item_number: str            # PDITM
    description: str            # PDDSC1
    quantity_ordered: Decimal   # PDUORG / 100
    quantity_received: Decimal  # PDUREC / 100
    unit_price: Decimal         # PDPRRC, currency scaled
    extended_price: Decimal     # PDAEXP / 100
    foreign_unit_cost: Decimal  # PDFRRC / 10000
    foreign_extended_cost: Decimal  # PDFEA, unscaled
    promise_date: date | None   # PDPDDJ
    status: LineStatus          # PDLTTR
    next_status: LineStatus     # PDNXTR
    last_status: LineStatus     # PDLTTR


@dataclass(frozen=True)
class ReceiptDetail(_Record):
    po_number: str              # PRDOCO
    line_number: Decimal        # PRLNID / 1000
    receipt_number: str         # PRDOC
    item_number: str            # PRITM
    receipt_date: date          # PRRCDJ
    quantity_received: Decimal  # PRUREC / 100
    unit_cost: Decimal          # PRPRRC, currency scaled
    location: str               # PRLOCN
    lot_number: str | None = None  # PRLOTN


@dataclass(frozen=True)
class MrpMessage(_Record):
    item_number: str            # MMITM
    message_type: str           # MMMSGT
    message_date: date          # MMDRQJ
    text: str                   # MMDSC1
    quantity: Decimal           # MMUORG / 100
    priority: int               # MMPRTY
    status: str                 # MMMSGA


@dataclass(frozen=True)
class SalesOrderDetail(_Record):
    order_number: str           # SDDOCO
    line_number: Decimal        # SDLNID / 1000
    item_number: str            # SDITM
    customer_id: str            # SDAN8
    quantity_ordered: Decimal   # SDUORG / 100
    quantity_shipped: Decimal   # SDSOQS / 100
    unit_price: Decimal         # SDUPRC, currency scaled
    promise_date: date | None   # SDPDDJ
    status: LineStatus          # SDNXTR


@dataclass(frozen=True)
class InventoryLevel(_Record):
    item_number: str            # IMITM
    description: str
    item_type: str
    primary_uom: str            # IMUOM1
    purchasing_uom: str         # IMUOM3
    safety_stock: int
    min_order_qty: int
    max_order_qty: int
    lot_size: int
    cost_center: str
    planner: str
    buyer: str
    gl_class: str               # IMGLPT
    business_unit: str          # LIMCU
    on_hand: Decimal            # SUM(LIPQOH)
    on_order: Decimal           # SUM(LIPREQ)
    committed: Decimal          # hard + soft
    hard_committed: Decimal     # SUM(LIHCOM)
    soft_committed: Decimal     # SUM(LISWSC)
    in_transit: Decimal         # SUM(LIQTIN)
    backorder: Decimal          # SUM(LIPBCK)
    available_stock: Decimal
    net_stock: Decimal
    stock_status: StockStatus

    @classmethod
    def from_totals(cls, *, on_hand, on_order, hard_committed, soft_committed, **attrs) -> "InventoryLevel":
        committed = hard_committed + soft_committed
        available = on_hand - committed
        return cls(
            on_hand=on_hand,
            on_order=on_order,
            committed=committed,
            hard_committed=hard_committed,
            soft_committed=soft_committed,
            available_stock=available,
            net_stock=on_hand + on_order - committed,
            stock_status=derive_stock_status(available),
            **attrs,
        )


__all__ = [
    "ConnectionConfig",
    "InventoryLevel",
    "ItemLocation",
    "ItemMaster",
    "LOW_STOCK_THRESHOLD",
    "MrpMessage",
    "PurchaseOrderDetail",
    "PurchaseOrderHeader",
    "ReceiptDetail",
    "SalesOrderDetail",
    "StockStatus",
    "SupplierInfo",
    "derive_stock_status",
]
