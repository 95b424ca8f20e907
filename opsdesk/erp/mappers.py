"""Row -> record mappers.

Each mapper takes one row (column name -> raw value, upper-case keys) and
returns a frozen record. Every packed field goes through the codec; missing
columns fall back to the codec defaults so a reduced query shape still maps.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Mapping

from .codec import (
    DEFAULT_CURRENCY,
    DEFAULT_UOM,
    EXTENDED_PRICE_SCALE,
    FOREIGN_UNIT_COST_SCALE,
    HEADER_TOTAL_SCALE,
    LINE_NUMBER_SCALE,
    LINE_STATUS,
    ORDER_STATUS,
    QUANTITY_SCALE,
    decode_currency_amount,
    decode_decimal,
    decode_int,
    decode_julian_date,
    decode_non_negative_int,
    decode_optional_julian_date,
    decode_scaled,
    decode_status_code,
    decode_text,
)
from .records import (
    InventoryLevel,
    ItemLocation,
    ItemMaster,
    MrpMessage,
    PurchaseOrderDetail,
    PurchaseOrderHeader,
    ReceiptDetail,
    SalesOrderDetail,
    SupplierInfo,
)

Row = Mapping[str, object]

BASE_CURRENCY = "USD"


def _join_text(*parts) -> str:
    return " ".join(p for p in (decode_text(x) for x in parts) if p)


def supplier_name(raw_name, supplier_id) -> str:
    return decode_text(raw_name) or f"Supplier {decode_text(supplier_id, 'Unknown')}"


def map_item_master(row: Row) -> ItemMaster:
    return ItemMaster(
        item_number=decode_text(row.get("IMITM")),
        long_item_number=decode_text(row.get("IMLITM")),
        description=_join_text(row.get("IMDSC1"), row.get("IMDSC2")),
        item_type=decode_text(row.get("IMSTKT")),
        unit_of_measure=decode_text(row.get("IMUOM1"), DEFAULT_UOM),
        purchasing_uom=decode_text(row.get("IMUOM3"), DEFAULT_UOM),
        gl_class=decode_text(row.get("IMGLPT")),
        lead_time=decode_non_negative_int(row.get("IMLTLV")),
        safety_stock=decode_non_negative_int(row.get("IBSAFE")),
        min_order_qty=decode_non_negative_int(row.get("IBROQN")),
        max_order_qty=decode_non_negative_int(row.get("IBROQX")),
        lot_size=decode_non_negative_int(row.get("IBROQI")),
        cost_center=decode_text(row.get("IMPRGR")),
        planner=decode_text(row.get("IMDSGP")) or decode_text(row.get("IMANPL")),
        buyer=decode_text(row.get("IMBUYR")),
    )


def map_item_location(row: Row, *, today: date | None = None) -> ItemLocation:
    count_qty = row.get("LILCQT")
    return ItemLocation(
        item_number=decode_text(row.get("LIITM")),
        branch=decode_text(row.get("LIMCU")),
        location=decode_text(row.get("LILOCN")),
        on_hand=decode_decimal(row.get("LIPQOH")),
        on_order=decode_decimal(row.get("LIPREQ")),
        committed=decode_decimal(row.get("LIHCOM")) + decode_decimal(row.get("LISWSC")),
        last_count_date=decode_optional_julian_date(row.get("LILCDJ"), today=today),
        last_count_quantity=None if count_qty is None else decode_decimal(count_qty),
    )


def map_supplier(row: Row | None, supplier_id) -> SupplierInfo:
    row = row or {}
    return SupplierInfo(
        supplier_id=decode_text(row.get("ABAN8")) or decode_text(supplier_id),
        name=supplier_name(row.get("ABALPH"), supplier_id),
        address=", ".join(
            p for p in (decode_text(row.get(col)) for col in ("ABAT1", "ABAT2", "ABAT3", "ABAT4")) if p
        ),
    )


def map_purchase_order_header(row: Row, *, line_item_count: int | None = None, today: date | None = None) -> PurchaseOrderHeader:
    supplier = map_supplier(row, row.get("PHAN8"))
    if line_item_count is None:
        line_item_count = decode_non_negative_int(row.get("LINE_COUNT"))
    approver_id = decode_text(row.get("HORPER")) or None
    return PurchaseOrderHeader(
        po_number=decode_text(row.get("PHDOCO")),
        supplier_id=decode_text(row.get("PHAN8")),
        supplier_name=supplier.name,
        supplier_address=supplier.address,
        order_date=decode_julian_date(row.get("PHTRDJ"), today=today),
        request_date=decode_optional_julian_date(row.get("PHDRQJ"), today=today),
        promise_date=decode_optional_julian_date(row.get("PHPDDJ"), today=today),
        status=decode_status_code(row.get("PHDCTO"), ORDER_STATUS),
        # PHOTOT is stored x100 in base currency no matter the transaction currency
        total_base=decode_scaled(row.get("PHOTOT"), HEADER_TOTAL_SCALE),
        total_foreign=decode_decimal(row.get("PHFAP")),
        currency_code=decode_text(row.get("PHCRCD"), DEFAULT_CURRENCY),
        base_currency_code=BASE_CURRENCY,
        buyer=decode_text(row.get("PHORBY")),
        business_unit=decode_text(row.get("PHMCU")),
        order_type=decode_text(row.get("PHDCTO")),
        line_item_count=line_item_count,
        approver_name=decode_text(row.get("APPROVER_NAME")) or None,
        approver_id=approver_id,
        approval_route=decode_text(row.get("HOARTG")) or None,
    )


def map_purchase_order_detail(row: Row, *, currency_code=None, today: date | None = None) -> PurchaseOrderDetail:
    # blank line currency inherits the header's (PHCRCD)
    currency = decode_text(row.get("PDCRCD")) or decode_text(currency_code) or DEFAULT_CURRENCY
    last_status = decode_status_code(row.get("PDLTTR"), LINE_STATUS)
    return PurchaseOrderDetail(
        po_number=decode_text(row.get("PDDOCO")),
        line_number=decode_scaled(row.get("PDLNID"), LINE_NUMBER_SCALE),
        item_number=decode_text(row.get("PDITM")),
        description=decode_text(row.get("PDDSC1")),
        quantity_ordered=decode_scaled(row.get("PDUORG"), QUANTITY_SCALE),
        quantity_received=decode_scaled(row.get("PDUREC"), QUANTITY_SCALE),
        unit_price=decode_currency_amount(row.get("PDPRRC"), currency),
        extended_price=decode_scaled(row.get("PDAEXP"), EXTENDED_PRICE_SCALE),
        foreign_unit_cost=decode_scaled(row.get("PDFRRC"), FOREIGN_UNIT_COST_SCALE),
        foreign_extended_cost=decode_decimal(row.get("PDFEA")),
        promise_date=decode_optional_julian_date(row.get("PDPDDJ"), today=today),
        status=last_status,
        next_status=decode_status_code(row.get("PDNXTR"), LINE_STATUS),
        last_status=last_status,
    )


def map_receipt_detail(row: Row, *, today: date | None = None) -> ReceiptDetail:
    return ReceiptDetail(
        po_number=decode_text(row.get("PRDOCO")),
        line_number=decode_scaled(row.get("PRLNID"), LINE_NUMBER_SCALE),
        receipt_number=decode_text(row.get("PRDOC")),
        item_number=decode_text(row.get("PRITM")),
        receipt_date=decode_julian_date(row.get("PRRCDJ"), today=today),
        quantity_received=decode_scaled(row.get("PRUREC"), QUANTITY_SCALE),
        unit_cost=decode_currency_amount(row.get("PRPRRC"), row.get("PRCRCD")),
        location=decode_text(row.get("PRLOCN")),
        lot_number=decode_text(row.get("PRLOTN")) or None,
    )


def map_mrp_message(row: Row, *, today: date | None = None) -> MrpMessage:
    return MrpMessage(
        item_number=decode_text(row.get("MMITM")),
        message_type=decode_text(row.get("MMMSGT")),
        message_date=decode_julian_date(row.get("MMDRQJ"), today=today),
        text=decode_text(row.get("MMDSC1")),
        quantity=decode_scaled(row.get("MMUORG"), QUANTITY_SCALE),
        priority=decode_non_negative_int(row.get("MMPRTY")),
        status=decode_text(row.get("MMMSGA")),
    )


def map_sales_order_detail(row: Row, *, today: date | None = None) -> SalesOrderDetail:
    return SalesOrderDetail(
        order_number=decode_text(row.get("SDDOCO")),
        line_number=decode_scaled(row.get("SDLNID"), LINE_NUMBER_SCALE),
        item_number=decode_text(row.get("SDITM")),
        customer_id=decode_text(row.get("SDAN8")),
        quantity_ordered=decode_scaled(row.get("SDUORG"), QUANTITY_SCALE),
        quantity_shipped=decode_scaled(row.get("SDSOQS"), QUANTITY_SCALE),
        unit_price=decode_currency_amount(row.get("SDUPRC"), row.get("SDCRCD")),
        promise_date=decode_optional_julian_date(row.get("SDPDDJ"), today=today),
        status=decode_status_code(row.get("SDNXTR"), LINE_STATUS),
    )


def map_inventory_level(row: Row) -> InventoryLevel:
    return InventoryLevel.from_totals(
        on_hand=decode_decimal(row.get("TOTAL_QOH")),
        on_order=decode_decimal(row.get("TOTAL_QOO")),
        hard_committed=decode_decimal(row.get("TOTAL_HARD_COMMIT")),
        soft_committed=decode_decimal(row.get("TOTAL_SOFT_COMMIT")),
        item_number=decode_text(row.get("IMITM")),
        description=_join_text(row.get("IMDSC1"), row.get("IMDSC2")),
        item_type=decode_text(row.get("IMSTKT")),
        primary_uom=decode_text(row.get("IMUOM1"), DEFAULT_UOM),
        purchasing_uom=decode_text(row.get("IMUOM3"), DEFAULT_UOM),
        safety_stock=decode_non_negative_int(row.get("IBSAFE")),
        min_order_qty=decode_non_negative_int(row.get("IBROQN")),
        max_order_qty=decode_non_negative_int(row.get("IBROQX")),
        lot_size=decode_non_negative_int(row.get("IBROQI")),
        cost_center=decode_text(row.get("IMPRGR")),
        planner=decode_text(row.get("IMDSGP")) or decode_text(row.get("IMANPL")),
        buyer=decode_text(row.get("IMBUYR")),
        gl_class=decode_text(row.get("IMGLPT")),
        business_unit=decode_text(row.get("LIMCU")),
        in_transit=decode_decimal(row.get("TOTAL_IN_TRANSIT")),
        backorder=decode_decimal(row.get("TOTAL_BACKORDER")),
    )


def decode_count(row: Row | None, column: str = "TOTAL") -> int:
    if not row:
        return 0
    return max(0, decode_int(row.get(column)))


__all__ = [
    "BASE_CURRENCY",
    "decode_count",
    "map_inventory_level",
    "map_item_location",
    "map_item_master",
    "map_mrp_message",
    "map_purchase_order_detail",
    "map_purchase_order_header",
    "map_receipt_detail",
    "map_sales_order_detail",
    "map_supplier",
    "supplier_name",
]
