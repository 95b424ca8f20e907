from __future__ import annotations

import copy
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import QueuePool

from opsdesk.erp.fallback import ChainState, QueryVariant, run_chain

from conftest import LEGACY_ROWS, build_legacy_engine, make_connector


class _FaultyConnection:
    def __init__(self, message: str):
        self.message = message
        self.executed: list[str] = []
        self.rollbacks = 0

    def execute(self, statement, params=None):
        self.executed.append(str(statement))
        raise OperationalError(str(statement), params, Exception(self.message))

    def rollback(self):
        self.rollbacks += 1


class _FakeManager:
    def __init__(self, conn):
        self.conn = conn

    @contextmanager
    def checkout(self):
        yield self.conn


def test_po_detail_chain_tries_shapes_in_order():
    engine = build_legacy_engine(drop_columns={"F4311": ("PDKCOO", "PDFEA")})
    connector = make_connector(engine)

    result = connector.get_purchase_order_details("1001")

    assert list(result.attempted) == ["company_qualified", "unqualified", "minimal"]
    assert result.variant == "minimal"
    assert result.is_ok
    assert [r.item_number for r in result] == ["ITEM001", "ITEM002"]
    # minimal shape only carries key columns; the rest take defaults
    assert result.records[0].description == ""
    assert result.records[0].quantity_ordered == 0


def test_po_detail_company_miss_falls_back_to_unqualified():
    rows = copy.deepcopy(LEGACY_ROWS)
    for header in rows["F4301"]:
        if header["PHDOCO"] == 1001:
            header["PHKCOO"] = "00999"
    connector = make_connector(build_legacy_engine(rows=rows))

    result = connector.get_purchase_order_details("1001")

    assert list(result.attempted) == ["company_qualified", "unqualified"]
    assert result.variant == "unqualified"
    assert len(result) == 2


def test_po_detail_uses_header_company_code(connector):
    assert connector.get_company_code("1001") == "00200"
    assert connector.get_company_code("424242") == "00001"

    result = connector.get_purchase_order_details("1001")
    assert result.variant == "company_qualified"
    assert list(result.attempted) == ["company_qualified"]


def test_required_row_miss_on_last_variant_is_empty_not_failed(connector):
    result = connector.get_purchase_order_details("9999")

    assert result.is_empty
    assert not result.failed
    assert list(result.attempted) == ["company_qualified", "unqualified", "minimal"]


def test_item_master_without_branch_plan_table_uses_item_columns():
    connector = make_connector(build_legacy_engine(drop_tables=("F4102",)))

    result = connector.get_item_master("ITEM001")

    assert result.is_ok
    assert result.variant == "item_columns"
    assert result.records[0].safety_stock == 0
    assert result.records[0].description == "Raw Material A"


def test_connection_fault_stops_the_chain():
    conn = _FaultyConnection("ORA-03113: end-of-file on communication channel")
    variants = [
        QueryVariant("rich", "SELECT IMITM FROM F4101"),
        QueryVariant("minimal", "SELECT IMITM FROM F4101"),
    ]

    outcome = run_chain(_FakeManager(conn), variants, label="test")

    assert outcome.state is ChainState.ALL_FAILED
    assert outcome.attempted == ["rich"]
    assert len(conn.executed) == 1
    assert "ORA-03113" in outcome.error


def test_structural_errors_advance_until_exhausted():
    conn = _FaultyConnection("ORA-00904: \"IMXXX\": invalid identifier")
    variants = [QueryVariant("a", "SELECT 1"), QueryVariant("b", "SELECT 2"), QueryVariant("c", "SELECT 3")]

    outcome = run_chain(_FakeManager(conn), variants, label="test")

    assert outcome.state is ChainState.ALL_FAILED
    assert outcome.attempted == ["a", "b", "c"]
    assert conn.rollbacks == 3
    assert [a.state for a in outcome.attempts] == [ChainState.NEXT_VARIANT] * 3


def test_malformed_result_moves_to_next_variant(connector):
    variants = [
        QueryVariant("wrong_shape", "SELECT IMDSC1 FROM F4101", required_columns=("IMITM",)),
        QueryVariant("right_shape", "SELECT IMITM FROM F4101 ORDER BY IMITM", required_columns=("IMITM",)),
    ]

    outcome = run_chain(connector.connections, variants, label="test")

    assert outcome.succeeded
    assert outcome.variant == "right_shape"
    assert outcome.rows[0]["IMITM"] == "ITEM001"


def test_bind_params_only_passes_names_used_by_the_sql():
    variant = QueryVariant("v", "SELECT * FROM F4311 WHERE PDDOCO = :po_number AND PDKCOO = :company_code")
    assert variant.bind_names == {"po_number", "company_code"}
    assert variant.bind_params({"po_number": "1", "company_code": "00001", "page_limit": 5}) == {
        "po_number": "1",
        "company_code": "00001",
    }


def test_no_variants_is_all_failed():
    outcome = run_chain(_FakeManager(None), [], label="test")
    assert outcome.state is ChainState.ALL_FAILED


def test_exhausted_pool_is_a_failed_result_not_an_exception(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'jde.db'}",
        poolclass=QueuePool,
        pool_size=1,
        max_overflow=0,
        pool_timeout=0.2,
    )
    connector = make_connector(engine)
    connector.connect()
    held = engine.connect()
    try:
        result = connector.get_purchase_orders()
        assert result.is_empty
        assert result.failed
        assert "QueuePool limit" in result.reason

        assert connector.get_item_master().is_degraded
        assert connector.test_connection() is False
    finally:
        held.close()
        engine.dispose()
