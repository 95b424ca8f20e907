"""Public facade over the legacy JDE database.

Every domain query runs its variant chain, maps rows through the codec and
returns a tagged ``QueryResult``. Nothing here raises on query failure: a
chain that exhausts its variants becomes ``Degraded`` (item master, with mock
records) or ``Empty(failed=True)`` (every other domain).
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Callable, Sequence

from . import queries
from .codec import LINE_NUMBER_SCALE, decode_text
from .connection import ConnectionManager
from .errors import ErpConnectionError
from .fallback import ChainOutcome, ChainState, QueryVariant, run_chain
from .mappers import (
    decode_count,
    map_inventory_level,
    map_item_location,
    map_item_master,
    map_mrp_message,
    map_purchase_order_detail,
    map_purchase_order_header,
    map_receipt_detail,
    map_sales_order_detail,
    map_supplier,
)
from .mock_data import mock_item_master
from .paging import PageBounds, PageInfo, RowCap, page_bounds
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
from .results import QueryResult

logger = logging.getLogger(__name__)

DEFAULT_COMPANY = "00001"
DEFAULT_ITEM_ROW_CAP = 100

VariantBuilder = Callable[[str], Sequence[QueryVariant]]


class ErpConnector:
    def __init__(self, connections: ConnectionManager, *, default_company: str = DEFAULT_COMPANY,
                 item_row_cap: int = DEFAULT_ITEM_ROW_CAP):
        self.connections = connections
        self.default_company = default_company
        self.item_row_cap = item_row_cap

    @classmethod
    def from_app_config(cls, cfg, **kwargs) -> "ErpConnector":
        """Build from a Flask config; extra kwargs go to the ConnectionManager (e.g. engine_factory)."""
        return cls(
            ConnectionManager.from_app_config(cfg, **kwargs),
            default_company=cfg.get("ERP_DEFAULT_COMPANY", DEFAULT_COMPANY),
            item_row_cap=int(cfg.get("ERP_ITEM_ROW_CAP", DEFAULT_ITEM_ROW_CAP)),
        )

    ###########################################################################
    # Session
    ###########################################################################

    def connect(self):
        return self.connections.connect()

    def test_connection(self) -> bool:
        return self.connections.test_connection()

    def disconnect(self) -> None:
        self.connections.disconnect()

    ###########################################################################
    # Chain plumbing
    ###########################################################################

    def _run(self, label: str, build: VariantBuilder, params: dict | None = None) -> ChainOutcome:
        try:
            dialect = self.connections.dialect
        except ErpConnectionError as exc:
            logger.error("%s: JDE connection unavailable: %s", label, exc)
            return ChainOutcome(ChainState.ALL_FAILED, error=str(exc))
        outcome = run_chain(self.connections, build(dialect), params or {}, label=label)
        if outcome.succeeded:
            logger.debug("%s: %d row(s) via %s", label, len(outcome.rows), outcome.variant)
        return outcome

    def _single(self, label: str, sql: str | Callable[[str], str], params: dict) -> dict | None:
        """First row of a one-shape helper query, or None on failure/no rows."""
        def build(dialect):
            return [QueryVariant(label, sql(dialect) if callable(sql) else sql)]

        outcome = self._run(label, build, params)
        if not outcome.succeeded or not outcome.rows:
            return None
        return outcome.rows[0]

    @staticmethod
    def _empty_on_failure(label: str, outcome: ChainOutcome, page: PageInfo | None = None) -> QueryResult:
        logger.warning("%s: all query shapes failed, returning no records (%s)", label, outcome.error)
        return QueryResult.empty(outcome.error, failed=True, page=page, attempted=outcome.attempted)

    ###########################################################################
    # Item master / locations
    ###########################################################################

    def get_item_master(self, item_number: str | None = None, *, row_cap: int | None = None) -> QueryResult[ItemMaster]:
        """Item master rows; capped to ``item_row_cap`` unless a key or ``row_cap=0`` is given.

        Total failure serves mock items so screens that only need a catalogue
        keep working; the result is tagged ``Degraded``.
        """
        item_number = decode_text(item_number) or None
        cap_size = self.item_row_cap if row_cap is None else row_cap
        cap = RowCap(cap_size) if cap_size and not item_number else None
        params: dict = {"item_number": item_number}
        if cap is not None:
            params.update(cap.params())

        outcome = self._run(
            "item_master",
            lambda dialect: queries.item_master_variants(dialect, item_number=item_number, cap=cap),
            params,
        )
        if not outcome.succeeded:
            logger.warning("item_master: falling back to mock data (%s)", outcome.error)
            return QueryResult.degraded(
                mock_item_master(item_number),
                reason=outcome.error or "item master query failed",
                attempted=outcome.attempted,
            )
        return QueryResult.ok(
            [map_item_master(row) for row in outcome.rows],
            variant=outcome.variant,
            attempted=outcome.attempted,
        )

    def get_item_locations(self, item_number: str | None = None, branch: str | None = None) -> QueryResult[ItemLocation]:
        item_number = decode_text(item_number) or None
        branch = decode_text(branch) or None
        outcome = self._run(
            "item_location",
            lambda dialect: queries.item_location_variants(item_number=item_number, branch=branch),
            {"item_number": item_number, "branch": branch},
        )
        if not outcome.succeeded:
            return self._empty_on_failure("item_location", outcome)
        return QueryResult.ok(
            [map_item_location(row) for row in outcome.rows],
            variant=outcome.variant,
            attempted=outcome.attempted,
        )

    ###########################################################################
    # Purchase orders
    ###########################################################################

    def get_purchase_orders(
        self,
        po_number: str | None = None,
        *,
        po_range_start: str | None = None,
        po_range_end: str | None = None,
        page: int | None = None,
        page_size: int | None = None,
    ) -> QueryResult[PurchaseOrderHeader]:
        """Open purchase orders (types O2/OP/O7, no closed lines), newest first.

        Passing ``page`` (and optionally ``page_size``) pages in the database
        and attaches a ``PageInfo`` with the filtered total.
        """
        filters = {
            "po_number": decode_text(po_number) or None,
            "po_range_start": decode_text(po_range_start) or None,
            "po_range_end": decode_text(po_range_end) or None,
        }
        bounds: PageBounds | None = None
        params = dict(filters)
        if page is not None:
            bounds = page_bounds(page, page_size or 50)
            params.update(bounds.params())

        outcome = self._run(
            "purchase_orders",
            lambda dialect: queries.purchase_order_variants(dialect, bounds=bounds, **filters),
            params,
        )
        page_info = None
        if bounds is not None:
            page_info = PageInfo(bounds.page, bounds.page_size, self.count_purchase_orders(**filters))
        if not outcome.succeeded:
            return self._empty_on_failure("purchase_orders", outcome, page_info)
        return QueryResult.ok(
            [map_purchase_order_header(row) for row in outcome.rows],
            variant=outcome.variant,
            page=page_info,
            attempted=outcome.attempted,
        )

    def count_purchase_orders(self, po_number: str | None = None, *, po_range_start: str | None = None,
                              po_range_end: str | None = None) -> int:
        filters = {
            "po_number": decode_text(po_number) or None,
            "po_range_start": decode_text(po_range_start) or None,
            "po_range_end": decode_text(po_range_end) or None,
        }
        row = self._single("purchase_order_count", queries.purchase_order_count_sql(**filters), filters)
        return decode_count(row)

    def get_line_item_count(self, po_number: str) -> int:
        row = self._single("line_item_count", queries.LINE_COUNT_SQL, {"po_number": decode_text(po_number)})
        return decode_count(row, "LINE_COUNT")

    def get_supplier_info(self, supplier_id: str) -> SupplierInfo:
        """Name and address from the address book; unknown suppliers get ``Supplier <id>``."""
        supplier_id = decode_text(supplier_id)
        row = self._single("supplier_info", queries.SUPPLIER_SQL, {"supplier_id": supplier_id})
        return map_supplier(row, supplier_id)

    def _order_header_keys(self, po_number: str) -> tuple[str, str | None]:
        """(company code, header currency) of a PO; unknown orders get the default company."""
        outcome = self._run(
            "order_header_keys",
            queries.order_header_key_variants,
            {"po_number": decode_text(po_number), "row_cap": 1},
        )
        row = outcome.rows[0] if outcome.succeeded and outcome.rows else {}
        company = decode_text(row.get("PHKCOO")) or self.default_company
        return company, decode_text(row.get("PHCRCD")) or None

    def get_company_code(self, po_number: str) -> str:
        return self._order_header_keys(po_number)[0]

    def get_purchase_order_details(self, po_number: str) -> QueryResult[PurchaseOrderDetail]:
        po_number = decode_text(po_number)
        company_code, header_currency = self._order_header_keys(po_number)
        outcome = self._run(
            "purchase_order_details",
            lambda dialect: queries.purchase_order_detail_variants(),
            {"po_number": po_number, "company_code": company_code},
        )
        if not outcome.succeeded:
            return self._empty_on_failure("purchase_order_details", outcome)
        return QueryResult.ok(
            [map_purchase_order_detail(row, currency_code=header_currency) for row in outcome.rows],
            variant=outcome.variant,
            attempted=outcome.attempted,
        )

    def get_receipt_details(self, po_number: str, line_number=None) -> QueryResult[ReceiptDetail]:
        """Receipts against a PO, optionally one line (display line number, e.g. ``1`` or ``1.5``)."""
        params: dict = {"po_number": decode_text(po_number)}
        line_id = _line_id(line_number)
        if line_id is not None:
            params["line_id"] = line_id
        outcome = self._run(
            "receipt_details",
            lambda dialect: queries.receipt_variants(line_number=line_id is not None),
            params,
        )
        if not outcome.succeeded:
            return self._empty_on_failure("receipt_details", outcome)
        return QueryResult.ok(
            [map_receipt_detail(row) for row in outcome.rows],
            variant=outcome.variant,
            attempted=outcome.attempted,
        )

    ###########################################################################
    # Planning / sales
    ###########################################################################

    def get_mrp_messages(self, item_number: str | None = None) -> QueryResult[MrpMessage]:
        item_number = decode_text(item_number) or None
        outcome = self._run(
            "mrp_messages",
            lambda dialect: queries.mrp_message_variants(item_number=item_number),
            {"item_number": item_number},
        )
        if not outcome.succeeded:
            return self._empty_on_failure("mrp_messages", outcome)
        return QueryResult.ok(
            [map_mrp_message(row) for row in outcome.rows],
            variant=outcome.variant,
            attempted=outcome.attempted,
        )

    def get_sales_order_details(
        self,
        order_number: str | None = None,
        *,
        item_number: str | None = None,
        page: int | None = None,
        page_size: int | None = None,
    ) -> QueryResult[SalesOrderDetail]:
        order_number = decode_text(order_number) or None
        item_number = decode_text(item_number) or None
        params: dict = {"order_number": order_number, "item_number": item_number}
        bounds = None
        if page is not None:
            bounds = page_bounds(page, page_size or 50)
            params.update(bounds.params())
        outcome = self._run(
            "sales_order_details",
            lambda dialect: queries.sales_order_detail_variants(
                dialect, order_number=order_number, item_number=item_number, bounds=bounds
            ),
            params,
        )
        if not outcome.succeeded:
            return self._empty_on_failure("sales_order_details", outcome)
        return QueryResult.ok(
            [map_sales_order_detail(row) for row in outcome.rows],
            variant=outcome.variant,
            attempted=outcome.attempted,
        )

    ###########################################################################
    # Inventory
    ###########################################################################

    def get_inventory_levels(
        self,
        item_number: str | None = None,
        *,
        business_unit: str | None = None,
        page: int | None = None,
        page_size: int | None = None,
    ) -> QueryResult[InventoryLevel]:
        item_number = decode_text(item_number) or None
        business_unit = decode_text(business_unit) or None
        params: dict = {"item_number": item_number, "business_unit": business_unit}
        bounds = None
        if page is not None:
            bounds = page_bounds(page, page_size or 50)
            params.update(bounds.params())

        outcome = self._run(
            "inventory_levels",
            lambda dialect: queries.inventory_level_variants(
                dialect, item_number=item_number, business_unit=business_unit, bounds=bounds
            ),
            params,
        )
        page_info = None
        if bounds is not None:
            row = self._single(
                "inventory_count",
                queries.inventory_count_sql(item_number=item_number, business_unit=business_unit),
                {"item_number": item_number, "business_unit": business_unit},
            )
            page_info = PageInfo(bounds.page, bounds.page_size, decode_count(row))
        if not outcome.succeeded:
            return self._empty_on_failure("inventory_levels", outcome, page_info)
        return QueryResult.ok(
            [map_inventory_level(row) for row in outcome.rows],
            variant=outcome.variant,
            page=page_info,
            attempted=outcome.attempted,
        )

    def get_all_inventory_items(self, *, business_unit: str | None = None) -> QueryResult[InventoryLevel]:
        """Unpaged inventory extraction (sync, cache, export)."""
        return self.get_inventory_levels(business_unit=business_unit)

    def get_inventory_gl_classes(self) -> list[str]:
        outcome = self._run("gl_classes", lambda dialect: queries.gl_class_variants())
        if not outcome.succeeded:
            logger.warning("gl_classes: query failed (%s)", outcome.error)
            return []
        classes = {decode_text(row.get("IMGLPT")) for row in outcome.rows}
        return sorted(c for c in classes if c)


def _line_id(line_number) -> int | None:
    if line_number is None or line_number == "":
        return None
    try:
        return int(Decimal(str(line_number)) * LINE_NUMBER_SCALE)
    except (InvalidOperation, ValueError):
        return None


def get_connector(app=None) -> ErpConnector:
    """The app's shared connector, created on first use and kept in ``app.extensions``."""
    from flask import current_app

    app = app or current_app._get_current_object()
    connector = app.extensions.get("erp_connector")
    if connector is None:
        connector = ErpConnector.from_app_config(app.config)
        app.extensions["erp_connector"] = connector
    return connector


__all__ = ["DEFAULT_COMPANY", "ErpConnector", "get_connector"]
