from __future__ import annotations

from .. import db
from . import now_local_naive
from sqlalchemy import Index

#-------------------------------------------------------
# Local copies of legacy ERP records, keyed by natural identifier.
# Written only by opsdesk.erp.sync; every other caller treats them as read-only.
#-------------------------------------------------------
class ErpItemMaster(db.Model):
    """Synced copy of F4101 item master rows."""

    __tablename__ = "erp_item_master"
    __table_args__ = (
        Index("IX_ErpItemMaster_GLClass", "gl_class"),
    )

    item_number     = db.Column(db.String(25),  primary_key=True)  # IMITM
    long_item_number = db.Column(db.String(25), nullable=True)     # IMLITM
    description     = db.Column(db.String(255), nullable=False, default="")
    item_type       = db.Column(db.String(10),  nullable=False, default="")
    unit_of_measure = db.Column(db.String(10),  nullable=False, default="EA")
    purchasing_uom  = db.Column(db.String(10),  nullable=False, default="EA")
    gl_class        = db.Column(db.String(10),  nullable=False, default="")
    lead_time       = db.Column(db.Integer,     nullable=False, default=0)
    safety_stock    = db.Column(db.Integer,     nullable=False, default=0)
    min_order_qty   = db.Column(db.Integer,     nullable=False, default=0)
    max_order_qty   = db.Column(db.Integer,     nullable=False, default=0)
    lot_size        = db.Column(db.Integer,     nullable=False, default=0)
    cost_center     = db.Column(db.String(20),  nullable=False, default="")
    planner         = db.Column(db.String(20),  nullable=False, default="")
    buyer           = db.Column(db.String(20),  nullable=False, default="")

    synced_at       = db.Column(db.DateTime(timezone=False), nullable=False, default=now_local_naive)

    def __repr__(self):  # pragma: no cover - debug aid
        return f"<ErpItemMaster {self.item_number} {self.description!r}>"


class ErpPurchaseOrder(db.Model):
    """Synced copy of F4301 purchase order headers."""

    __tablename__ = "erp_purchase_order"
    __table_args__ = (
        Index("IX_ErpPurchaseOrder_Supplier", "supplier_id"),
        Index("IX_ErpPurchaseOrder_Status", "status"),
    )

    po_number          = db.Column(db.String(20),  primary_key=True)  # PHDOCO
    supplier_id        = db.Column(db.String(20),  nullable=False, default="")
    supplier_name      = db.Column(db.String(255), nullable=False, default="")
    supplier_address   = db.Column(db.String(500), nullable=False, default="")
    order_date         = db.Column(db.Date,        nullable=True)
    request_date       = db.Column(db.Date,        nullable=True)
    promise_date       = db.Column(db.Date,        nullable=True)
    status             = db.Column(db.String(16),  nullable=False, default="ACTIVE")
    total_base         = db.Column(db.Numeric(18, 4), nullable=False, default=0)   # USD
    total_foreign      = db.Column(db.Numeric(18, 4), nullable=False, default=0)
    currency_code      = db.Column(db.String(3),   nullable=False, default="USD")
    base_currency_code = db.Column(db.String(3),   nullable=False, default="USD")
    buyer              = db.Column(db.String(20),  nullable=False, default="")
    business_unit      = db.Column(db.String(20),  nullable=False, default="")
    order_type         = db.Column(db.String(4),   nullable=False, default="")
    line_item_count    = db.Column(db.Integer,     nullable=False, default=0)
    approver_name      = db.Column(db.String(255), nullable=True)
    approver_id        = db.Column(db.String(20),  nullable=True)
    approval_route     = db.Column(db.String(20),  nullable=True)

    synced_at          = db.Column(db.DateTime(timezone=False), nullable=False, default=now_local_naive)

    def __repr__(self):  # pragma: no cover - debug aid
        return f"<ErpPurchaseOrder {self.po_number} status={self.status}>"


class ErpInventoryLevel(db.Model):
    """Synced per-item stock aggregates (F4101 x F41021)."""

    __tablename__ = "erp_inventory_level"
    __table_args__ = (
        Index("IX_ErpInventoryLevel_Status", "stock_status"),
        Index("IX_ErpInventoryLevel_BU", "business_unit"),
    )

    item_number       = db.Column(db.String(25),  primary_key=True)
    description       = db.Column(db.String(255), nullable=False, default="")
    item_type         = db.Column(db.String(10),  nullable=False, default="")
    primary_uom       = db.Column(db.String(10),  nullable=False, default="EA")
    purchasing_uom    = db.Column(db.String(10),  nullable=False, default="EA")
    gl_class          = db.Column(db.String(10),  nullable=False, default="")
    business_unit     = db.Column(db.String(20),  nullable=False, default="")
    safety_stock      = db.Column(db.Integer,     nullable=False, default=0)
    min_order_qty     = db.Column(db.Integer,     nullable=False, default=0)
    max_order_qty     = db.Column(db.Integer,     nullable=False, default=0)
    lot_size          = db.Column(db.Integer,     nullable=False, default=0)
    cost_center       = db.Column(db.String(20),  nullable=False, default="")
    planner           = db.Column(db.String(20),  nullable=False, default="")
    buyer             = db.Column(db.String(20),  nullable=False, default="")

    on_hand           = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    on_order          = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    committed         = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    hard_committed    = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    soft_committed    = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    in_transit        = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    backorder         = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    available_stock   = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    net_stock         = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    stock_status      = db.Column(db.String(4),   nullable=False, default="OUT")

    synced_at         = db.Column(db.DateTime(timezone=False), nullable=False, default=now_local_naive)

    def __repr__(self):  # pragma: no cover - debug aid
        return f"<ErpInventoryLevel {self.item_number} {self.stock_status}>"
