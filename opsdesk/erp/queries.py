"""SQL shapes for each legacy domain query, richest first.

Table and column names follow the JDE schema exactly. Builders return the
variant list for one call; filters are bound parameters, never formatted in.
"""

from __future__ import annotations

from .fallback import QueryVariant
from .paging import PageBounds, RowCap

# Open purchase orders: standard types, no line already closed (999).
PO_OPEN_FILTER = """h.PHDCTO IN ('O2', 'OP', 'O7')
  AND NOT EXISTS (
    SELECT 1 FROM F4311 d
    WHERE d.PDDOCO = h.PHDOCO
    AND d.PDLTTR = '999'
  )"""

PO_HEADER_COLUMNS = (
    "h.PHDOCO, h.PHAN8, h.PHTRDJ, h.PHDRQJ, h.PHPDDJ, h.PHOTOT, h.PHFAP, "
    "h.PHCRCD, h.PHORBY, h.PHDCTO, h.PHMCU"
)

PO_DETAIL_COLUMNS = (
    "PDDOCO, PDLNID, PDITM, PDDSC1, PDUORG, PDUREC, "
    "PDPRRC, PDCRCD, PDAEXP, PDPDDJ, PDLTTR, PDNXTR, PDFRRC, PDFEA"
)

ITEM_COLUMNS = (
    "m.IMITM, m.IMLITM, m.IMDSC1, m.IMDSC2, m.IMSTKT, m.IMUOM1, m.IMUOM3, "
    "m.IMGLPT, m.IMLTLV, m.IMPRGR, m.IMDSGP, m.IMBUYR, m.IMANPL"
)

# One row per item with its branch-plant planning figures.
BRANCH_PLAN_SUBQUERY = """(
    SELECT IBITM, MAX(IBSAFE) AS IBSAFE, MAX(IBROQN) AS IBROQN,
           MAX(IBROQX) AS IBROQX, MAX(IBROQI) AS IBROQI
    FROM F4102
    GROUP BY IBITM
  )"""


def _where(clauses: list[str]) -> str:
    return " AND ".join(clauses) if clauses else "1 = 1"


def _tail(bounds: PageBounds | None, cap: RowCap | None, dialect: str) -> str:
    if bounds is not None:
        return bounds.paging_clause(dialect)
    if cap is not None:
        return cap.tail_clause(dialect)
    return ""


#-------------------------------------------------------
# Item master (F4101 / F4102)
#-------------------------------------------------------
def item_master_variants(dialect: str, *, item_number: str | None = None, cap: RowCap | None = None) -> list[QueryVariant]:
    clauses: list[str] = []
    if item_number:
        clauses.append("m.IMITM = :item_number")
    elif cap is not None:
        predicate = cap.where_predicate(dialect)
        if predicate:
            clauses.append(predicate)
    where = _where(clauses)
    tail = "" if item_number else _tail(None, cap, dialect)
    require_rows = bool(item_number)
    required = ("IMITM",)

    return [
        QueryVariant(
            "branch_join",
            f"""
            SELECT {ITEM_COLUMNS},
                   b.IBSAFE, b.IBROQN, b.IBROQX, b.IBROQI
            FROM F4101 m
            LEFT JOIN {BRANCH_PLAN_SUBQUERY} b ON b.IBITM = m.IMITM
            WHERE {where}
            ORDER BY m.IMITM
            {tail}
            """,
            require_rows=require_rows,
            required_columns=required,
        ),
        QueryVariant(
            "item_columns",
            f"""
            SELECT {ITEM_COLUMNS}
            FROM F4101 m
            WHERE {where}
            ORDER BY m.IMITM
            {tail}
            """,
            require_rows=require_rows,
            required_columns=required,
        ),
        QueryVariant(
            "minimal",
            f"""
            SELECT m.IMITM, m.IMLITM, m.IMDSC1, m.IMDSC2
            FROM F4101 m
            WHERE {where}
            ORDER BY m.IMITM
            {tail}
            """,
            require_rows=require_rows,
            required_columns=required,
        ),
    ]


def gl_class_variants() -> list[QueryVariant]:
    return [
        QueryVariant(
            "distinct_gl_classes",
            """
            SELECT DISTINCT TRIM(IMGLPT) AS IMGLPT
            FROM F4101
            WHERE IMGLPT IS NOT NULL
            ORDER BY 1
            """,
        ),
    ]


#-------------------------------------------------------
# Item location (F41021)
#-------------------------------------------------------
def item_location_variants(*, item_number: str | None = None, branch: str | None = None) -> list[QueryVariant]:
    clauses: list[str] = []
    if item_number:
        clauses.append("LIITM = :item_number")
    if branch:
        clauses.append("TRIM(LIMCU) = :branch")
    where = _where(clauses)
    require_rows = bool(item_number)

    return [
        QueryVariant(
            "with_counts",
            f"""
            SELECT LIITM, LIMCU, LILOCN, LIPQOH, LIPREQ, LIHCOM, LISWSC, LILCDJ, LILCQT
            FROM F41021
            WHERE {where}
            ORDER BY LIITM, LIMCU, LILOCN
            """,
            require_rows=require_rows,
            required_columns=("LIITM", "LIMCU"),
        ),
        QueryVariant(
            "quantities",
            f"""
            SELECT LIITM, LIMCU, LILOCN, LIPQOH, LIPREQ, LIHCOM, LISWSC
            FROM F41021
            WHERE {where}
            ORDER BY LIITM, LIMCU, LILOCN
            """,
            require_rows=require_rows,
            required_columns=("LIITM", "LIMCU"),
        ),
    ]


#-------------------------------------------------------
# Purchase order header (F4301 + F0101 + F4209)
#-------------------------------------------------------
def _po_filter(po_number: str | None, po_range_start: str | None, po_range_end: str | None) -> str:
    clauses = [PO_OPEN_FILTER]
    if po_number:
        clauses.append("h.PHDOCO = :po_number")
    if po_range_start:
        clauses.append("h.PHDOCO >= :po_range_start")
    if po_range_end:
        clauses.append("h.PHDOCO <= :po_range_end")
    return _where(clauses)


def purchase_order_variants(
    dialect: str,
    *,
    po_number: str | None = None,
    po_range_start: str | None = None,
    po_range_end: str | None = None,
    bounds: PageBounds | None = None,
) -> list[QueryVariant]:
    where = _po_filter(po_number, po_range_start, po_range_end)
    tail = _tail(bounds, None, dialect)
    require_rows = bool(po_number)
    required = ("PHDOCO", "PHAN8")

    return [
        QueryVariant(
            "enriched",
            f"""
            SELECT DISTINCT {PO_HEADER_COLUMNS},
                   a.ABALPH, a.ABAT1, a.ABAT2, a.ABAT3, a.ABAT4,
                   (SELECT COUNT(*) FROM F4311 c WHERE c.PDDOCO = h.PHDOCO) AS LINE_COUNT,
                   (SELECT MAX(ho.HORPER) FROM F4209 ho WHERE ho.HODOCO = h.PHDOCO) AS HORPER,
                   (SELECT MAX(ho.HOARTG) FROM F4209 ho WHERE ho.HODOCO = h.PHDOCO) AS HOARTG,
                   (SELECT MAX(ab.ABALPH) FROM F4209 ho
                      JOIN F0101 ab ON ab.ABAN8 = ho.HORPER
                     WHERE ho.HODOCO = h.PHDOCO) AS APPROVER_NAME
            FROM F4301 h
            LEFT JOIN F0101 a ON a.ABAN8 = h.PHAN8
            WHERE {where}
            ORDER BY h.PHTRDJ DESC, h.PHDOCO
            {tail}
            """,
            require_rows=require_rows,
            required_columns=required,
        ),
        QueryVariant(
            "with_supplier",
            f"""
            SELECT DISTINCT {PO_HEADER_COLUMNS},
                   a.ABALPH, a.ABAT1, a.ABAT2, a.ABAT3, a.ABAT4
            FROM F4301 h
            LEFT JOIN F0101 a ON a.ABAN8 = h.PHAN8
            WHERE {where}
            ORDER BY h.PHTRDJ DESC, h.PHDOCO
            {tail}
            """,
            require_rows=require_rows,
            required_columns=required,
        ),
        QueryVariant(
            "header_only",
            f"""
            SELECT DISTINCT {PO_HEADER_COLUMNS}
            FROM F4301 h
            WHERE {where}
            ORDER BY h.PHTRDJ DESC, h.PHDOCO
            {tail}
            """,
            require_rows=require_rows,
            required_columns=required,
        ),
    ]


def purchase_order_count_sql(
    *,
    po_number: str | None = None,
    po_range_start: str | None = None,
    po_range_end: str | None = None,
) -> str:
    return f"""
        SELECT COUNT(DISTINCT h.PHDOCO) AS TOTAL
        FROM F4301 h
        WHERE {_po_filter(po_number, po_range_start, po_range_end)}
    """


LINE_COUNT_SQL = """
    SELECT COUNT(*) AS LINE_COUNT
    FROM F4311
    WHERE PDDOCO = :po_number
"""

SUPPLIER_SQL = """
    SELECT ABAN8, ABALPH, ABAT1, ABAT2, ABAT3, ABAT4
    FROM F0101
    WHERE ABAN8 = :supplier_id
"""


def company_code_sql(dialect: str, *, with_currency: bool = False) -> str:
    cap = RowCap(1)
    predicate = cap.where_predicate(dialect)
    extra = f"AND {predicate}" if predicate else ""
    columns = "PHKCOO, PHCRCD" if with_currency else "PHKCOO"
    return f"""
        SELECT {columns} FROM F4301
        WHERE PHDOCO = :po_number
        {extra}
        {cap.tail_clause(dialect)}
    """


def order_header_key_variants(dialect: str) -> list[QueryVariant]:
    """Company and currency of a PO header; detail lines inherit both when blank."""
    return [
        QueryVariant("with_currency", company_code_sql(dialect, with_currency=True), required_columns=("PHKCOO",)),
        QueryVariant("company_only", company_code_sql(dialect), required_columns=("PHKCOO",)),
    ]


#-------------------------------------------------------
# Purchase order detail (F4311)
#-------------------------------------------------------
def purchase_order_detail_variants() -> list[QueryVariant]:
    required = ("PDDOCO", "PDLNID")
    return [
        QueryVariant(
            "company_qualified",
            f"""
            SELECT {PO_DETAIL_COLUMNS}
            FROM F4311
            WHERE PDDOCO = :po_number
            AND PDKCOO = :company_code
            ORDER BY PDLNID
            """,
            require_rows=True,
            required_columns=required,
        ),
        QueryVariant(
            "unqualified",
            f"""
            SELECT {PO_DETAIL_COLUMNS}
            FROM F4311
            WHERE PDDOCO = :po_number
            ORDER BY PDLNID
            """,
            require_rows=True,
            required_columns=required,
        ),
        QueryVariant(
            "minimal",
            """
            SELECT PDDOCO, PDLNID, PDITM
            FROM F4311
            WHERE PDDOCO = :po_number
            ORDER BY PDLNID
            """,
            require_rows=True,
            required_columns=required,
        ),
    ]


#-------------------------------------------------------
# Receipts (F43121)
#-------------------------------------------------------
def receipt_variants(*, line_number: bool = False) -> list[QueryVariant]:
    where = "PRDOCO = :po_number"
    if line_number:
        where += " AND PRLNID = :line_id"
    required = ("PRDOCO", "PRLNID")
    return [
        QueryVariant(
            "with_lot",
            f"""
            SELECT PRDOCO, PRLNID, PRDOC, PRITM, PRRCDJ, PRUREC, PRPRRC, PRCRCD, PRLOCN, PRLOTN
            FROM F43121
            WHERE {where}
            ORDER BY PRLNID, PRDOC
            """,
            require_rows=True,
            required_columns=required,
        ),
        QueryVariant(
            "minimal",
            f"""
            SELECT PRDOCO, PRLNID, PRDOC, PRITM, PRRCDJ, PRUREC, PRPRRC, PRLOCN
            FROM F43121
            WHERE {where}
            ORDER BY PRLNID, PRDOC
            """,
            require_rows=True,
            required_columns=required,
        ),
    ]


#-------------------------------------------------------
# MRP messages (F3411)
#-------------------------------------------------------
def mrp_message_variants(*, item_number: str | None = None) -> list[QueryVariant]:
    where = "MMITM = :item_number" if item_number else "1 = 1"
    required = ("MMITM", "MMMSGT")
    return [
        QueryVariant(
            "full",
            f"""
            SELECT MMITM, MMMSGT, MMDRQJ, MMDSC1, MMUORG, MMPRTY, MMMSGA
            FROM F3411
            WHERE {where}
            ORDER BY MMITM, MMDRQJ
            """,
            required_columns=required,
        ),
        QueryVariant(
            "minimal",
            f"""
            SELECT MMITM, MMMSGT, MMDRQJ, MMUORG
            FROM F3411
            WHERE {where}
            ORDER BY MMITM, MMDRQJ
            """,
            required_columns=required,
        ),
    ]


#-------------------------------------------------------
# Sales order detail (F4211)
#-------------------------------------------------------
def sales_order_detail_variants(
    dialect: str,
    *,
    order_number: str | None = None,
    item_number: str | None = None,
    bounds: PageBounds | None = None,
) -> list[QueryVariant]:
    clauses: list[str] = []
    if order_number:
        clauses.append("SDDOCO = :order_number")
    if item_number:
        clauses.append("SDITM = :item_number")
    where = _where(clauses)
    tail = _tail(bounds, None, dialect)
    require_rows = bool(order_number)
    required = ("SDDOCO", "SDLNID")
    return [
        QueryVariant(
            "full",
            f"""
            SELECT SDDOCO, SDLNID, SDITM, SDAN8, SDUORG, SDSOQS, SDUPRC, SDCRCD, SDPDDJ, SDNXTR
            FROM F4211
            WHERE {where}
            ORDER BY SDDOCO, SDLNID
            {tail}
            """,
            require_rows=require_rows,
            required_columns=required,
        ),
        QueryVariant(
            "minimal",
            f"""
            SELECT SDDOCO, SDLNID, SDITM, SDAN8, SDUORG
            FROM F4211
            WHERE {where}
            ORDER BY SDDOCO, SDLNID
            {tail}
            """,
            require_rows=require_rows,
            required_columns=required,
        ),
    ]


#-------------------------------------------------------
# Inventory levels (F4101 x F41021 aggregates)
#-------------------------------------------------------
def _inventory_filter(item_number: str | None, business_unit: str | None) -> str:
    clauses: list[str] = []
    if item_number:
        clauses.append("m.IMITM = :item_number")
    if business_unit:
        clauses.append("TRIM(l.LIMCU) = :business_unit")
    return _where(clauses)


def inventory_level_variants(
    dialect: str,
    *,
    item_number: str | None = None,
    business_unit: str | None = None,
    bounds: PageBounds | None = None,
) -> list[QueryVariant]:
    where = _inventory_filter(item_number, business_unit)
    tail = _tail(bounds, None, dialect)
    require_rows = bool(item_number)
    required = ("IMITM", "TOTAL_QOH")

    item_attrs = (
        "MAX(m.IMLITM) AS IMLITM, MAX(m.IMDSC1) AS IMDSC1, MAX(m.IMDSC2) AS IMDSC2, "
        "MAX(m.IMSTKT) AS IMSTKT, MAX(m.IMUOM1) AS IMUOM1, MAX(m.IMUOM3) AS IMUOM3, "
        "MAX(m.IMGLPT) AS IMGLPT, MAX(m.IMPRGR) AS IMPRGR, MAX(m.IMDSGP) AS IMDSGP, "
        "MAX(m.IMBUYR) AS IMBUYR, MAX(m.IMANPL) AS IMANPL"
    )
    core_totals = (
        "MIN(TRIM(l.LIMCU)) AS LIMCU, "
        "SUM(l.LIPQOH) AS TOTAL_QOH, SUM(l.LIPREQ) AS TOTAL_QOO, "
        "SUM(l.LIHCOM) AS TOTAL_HARD_COMMIT, SUM(l.LISWSC) AS TOTAL_SOFT_COMMIT"
    )

    return [
        QueryVariant(
            "full",
            f"""
            SELECT m.IMITM, {item_attrs},
                   MAX(b.IBSAFE) AS IBSAFE, MAX(b.IBROQN) AS IBROQN,
                   MAX(b.IBROQX) AS IBROQX, MAX(b.IBROQI) AS IBROQI,
                   {core_totals},
                   SUM(l.LIQTIN) AS TOTAL_IN_TRANSIT, SUM(l.LIPBCK) AS TOTAL_BACKORDER
            FROM F4101 m
            JOIN F41021 l ON l.LIITM = m.IMITM
            LEFT JOIN {BRANCH_PLAN_SUBQUERY} b ON b.IBITM = m.IMITM
            WHERE {where}
            GROUP BY m.IMITM
            ORDER BY m.IMITM
            {tail}
            """,
            require_rows=require_rows,
            required_columns=required,
        ),
        QueryVariant(
            "without_branch_plan",
            f"""
            SELECT m.IMITM, {item_attrs},
                   {core_totals}
            FROM F4101 m
            JOIN F41021 l ON l.LIITM = m.IMITM
            WHERE {where}
            GROUP BY m.IMITM
            ORDER BY m.IMITM
            {tail}
            """,
            require_rows=require_rows,
            required_columns=required,
        ),
        QueryVariant(
            "minimal",
            f"""
            SELECT m.IMITM, MAX(m.IMDSC1) AS IMDSC1,
                   {core_totals}
            FROM F4101 m
            JOIN F41021 l ON l.LIITM = m.IMITM
            WHERE {where}
            GROUP BY m.IMITM
            ORDER BY m.IMITM
            {tail}
            """,
            require_rows=require_rows,
            required_columns=required,
        ),
    ]


def inventory_count_sql(*, item_number: str | None = None, business_unit: str | None = None) -> str:
    return f"""
        SELECT COUNT(DISTINCT m.IMITM) AS TOTAL
        FROM F4101 m
        JOIN F41021 l ON l.LIITM = m.IMITM
        WHERE {_inventory_filter(item_number, business_unit)}
    """
