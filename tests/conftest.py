from __future__ import annotations

from typing import Iterator

import pytest
from flask import Flask
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from opsdesk import create_app, db
from opsdesk.erp.connection import ConnectionManager
from opsdesk.erp.connector import ErpConnector
from opsdesk.erp.records import ConnectionConfig

# Cut-down JDE tables; only the columns the connector reads.
LEGACY_SCHEMA: dict[str, list[tuple[str, str]]] = {
    "F4101": [
        ("IMITM", "TEXT"), ("IMLITM", "TEXT"), ("IMDSC1", "TEXT"), ("IMDSC2", "TEXT"),
        ("IMSTKT", "TEXT"), ("IMUOM1", "TEXT"), ("IMUOM3", "TEXT"), ("IMGLPT", "TEXT"),
        ("IMLTLV", "INTEGER"), ("IMPRGR", "TEXT"), ("IMDSGP", "TEXT"), ("IMBUYR", "TEXT"),
        ("IMANPL", "TEXT"),
    ],
    "F4102": [
        ("IBITM", "TEXT"), ("IBMCU", "TEXT"), ("IBSAFE", "INTEGER"), ("IBROQN", "INTEGER"),
        ("IBROQX", "INTEGER"), ("IBROQI", "INTEGER"),
    ],
    "F41021": [
        ("LIITM", "TEXT"), ("LIMCU", "TEXT"), ("LILOCN", "TEXT"), ("LIPQOH", "NUMERIC"),
        ("LIPREQ", "NUMERIC"), ("LIHCOM", "NUMERIC"), ("LISWSC", "NUMERIC"), ("LIQTIN", "NUMERIC"),
        ("LIPBCK", "NUMERIC"), ("LILCDJ", "INTEGER"), ("LILCQT", "NUMERIC"),
    ],
    "F4301": [
        ("PHDOCO", "INTEGER"), ("PHDCTO", "TEXT"), ("PHKCOO", "TEXT"), ("PHAN8", "INTEGER"),
        ("PHTRDJ", "INTEGER"), ("PHDRQJ", "INTEGER"), ("PHPDDJ", "INTEGER"), ("PHOTOT", "NUMERIC"),
        ("PHFAP", "NUMERIC"), ("PHCRCD", "TEXT"), ("PHORBY", "TEXT"), ("PHMCU", "TEXT"),
    ],
    "F4311": [
        ("PDDOCO", "INTEGER"), ("PDKCOO", "TEXT"), ("PDLNID", "INTEGER"), ("PDITM", "TEXT"),
        ("PDDSC1", "TEXT"), ("PDUORG", "NUMERIC"), ("PDUREC", "NUMERIC"), ("PDPRRC", "NUMERIC"),
        ("PDCRCD", "TEXT"), ("PDAEXP", "NUMERIC"), ("PDPDDJ", "INTEGER"), ("PDLTTR", "TEXT"), ("PDNXTR", "TEXT"),
        ("PDFRRC", "NUMERIC"), ("PDFEA", "NUMERIC"),
    ],
    "F43121": [
        ("PRDOCO", "INTEGER"), ("PRLNID", "INTEGER"), ("PRDOC", "INTEGER"), ("PRITM", "TEXT"),
        ("PRRCDJ", "INTEGER"), ("PRUREC", "NUMERIC"), ("PRPRRC", "NUMERIC"), ("PRCRCD", "TEXT"),
        ("PRLOCN", "TEXT"), ("PRLOTN", "TEXT"),
    ],
    "F4211": [
        ("SDDOCO", "INTEGER"), ("SDLNID", "INTEGER"), ("SDITM", "TEXT"), ("SDAN8", "INTEGER"),
        ("SDUORG", "NUMERIC"), ("SDSOQS", "NUMERIC"), ("SDUPRC", "NUMERIC"), ("SDCRCD", "TEXT"),
        ("SDPDDJ", "INTEGER"), ("SDNXTR", "TEXT"),
    ],
    "F3411": [
        ("MMITM", "TEXT"), ("MMMSGT", "TEXT"), ("MMDRQJ", "INTEGER"), ("MMDSC1", "TEXT"),
        ("MMUORG", "NUMERIC"), ("MMPRTY", "INTEGER"), ("MMMSGA", "TEXT"),
    ],
    "F4209": [("HODOCO", "INTEGER"), ("HORPER", "INTEGER"), ("HOARTG", "TEXT")],
    "F0101": [
        ("ABAN8", "INTEGER"), ("ABALPH", "TEXT"), ("ABAT1", "TEXT"), ("ABAT2", "TEXT"),
        ("ABAT3", "TEXT"), ("ABAT4", "TEXT"),
    ],
}

LEGACY_ROWS: dict[str, list[dict]] = {
    "F4101": [
        dict(IMITM="ITEM001", IMLITM="RM-A-001", IMDSC1="Raw Material A", IMDSC2="", IMSTKT="P",
             IMUOM1="EA", IMUOM3="BOX", IMGLPT="IN10", IMLTLV=14, IMPRGR="CC001", IMDSGP="PLANNER1",
             IMBUYR="BUYER1", IMANPL=""),
        dict(IMITM="ITEM002", IMLITM="CMP-B-002", IMDSC1="Component B", IMDSC2="Stainless", IMSTKT="P",
             IMUOM1="KG", IMUOM3="KG", IMGLPT="IN20", IMLTLV=21, IMPRGR="CC002", IMDSGP="",
             IMBUYR="BUYER2", IMANPL="PLANNER2"),
        dict(IMITM="ITEM003", IMLITM="WDG-C-003", IMDSC1="Widget C", IMDSC2=None, IMSTKT="S",
             IMUOM1="EA", IMUOM3="EA", IMGLPT="IN10", IMLTLV=None, IMPRGR="CC001", IMDSGP="PLANNER1",
             IMBUYR="BUYER1", IMANPL=""),
    ],
    "F4102": [
        dict(IBITM="ITEM001", IBMCU="         M30", IBSAFE=100, IBROQN=50, IBROQX=1000, IBROQI=100),
    ],
    "F41021": [
        dict(LIITM="ITEM001", LIMCU="         M30", LILOCN="A-01", LIPQOH=5000, LIPREQ=1000, LIHCOM=1000,
             LISWSC=500, LIQTIN=200, LIPBCK=0, LILCDJ=124032, LILCQT=4800),
        dict(LIITM="ITEM001", LIMCU="         M30", LILOCN="B-02", LIPQOH=1000, LIPREQ=0, LIHCOM=0,
             LISWSC=0, LIQTIN=0, LIPBCK=0, LILCDJ=0, LILCQT=None),
        dict(LIITM="ITEM002", LIMCU="         M40", LILOCN="C-01", LIPQOH=8, LIPREQ=0, LIHCOM=0,
             LISWSC=0, LIQTIN=0, LIPBCK=5, LILCDJ=None, LILCQT=None),
        dict(LIITM="ITEM003", LIMCU="         M30", LILOCN="A-02", LIPQOH=100, LIPREQ=50, LIHCOM=60,
             LISWSC=40, LIQTIN=0, LIPBCK=0, LILCDJ=None, LILCQT=None),
    ],
    "F4301": [
        dict(PHDOCO=1001, PHDCTO="OP", PHKCOO="00200", PHAN8=5001, PHTRDJ=124015, PHDRQJ=124030,
             PHPDDJ=124045, PHOTOT=500000, PHFAP=25000, PHCRCD="USD", PHORBY="BUYER1", PHMCU="         M30"),
        dict(PHDOCO=1002, PHDCTO="O2", PHKCOO="00001", PHAN8=5002, PHTRDJ=124020, PHDRQJ=0,
             PHPDDJ=0, PHOTOT=120000, PHFAP=3000000, PHCRCD="VND", PHORBY="BUYER2", PHMCU="         M40"),
        # has a closed (999) line, never listed
        dict(PHDOCO=1003, PHDCTO="OP", PHKCOO="00001", PHAN8=5001, PHTRDJ=124010, PHDRQJ=0,
             PHPDDJ=0, PHOTOT=1000, PHFAP=0, PHCRCD="USD", PHORBY="BUYER1", PHMCU="         M30"),
        # not a purchase order type
        dict(PHDOCO=1004, PHDCTO="OR", PHKCOO="00001", PHAN8=5001, PHTRDJ=124011, PHDRQJ=0,
             PHPDDJ=0, PHOTOT=1000, PHFAP=0, PHCRCD="USD", PHORBY="BUYER1", PHMCU="         M30"),
    ],
    "F4311": [
        dict(PDDOCO=1001, PDKCOO="00200", PDLNID=1000, PDITM="ITEM001", PDDSC1="Raw Material A",
             PDUORG=1000, PDUREC=500, PDPRRC=125000, PDCRCD="USD", PDAEXP=12500, PDPDDJ=124045, PDLTTR="520",
             PDNXTR="550", PDFRRC=125000, PDFEA=12500),
        dict(PDDOCO=1001, PDKCOO="00200", PDLNID=2000, PDITM="ITEM002", PDDSC1="Component B",
             PDUORG=250, PDUREC=0, PDPRRC=40000, PDCRCD="USD", PDAEXP=10000, PDPDDJ=None, PDLTTR="400",
             PDNXTR="520", PDFRRC=40000, PDFEA=10000),
        dict(PDDOCO=1002, PDKCOO="00001", PDLNID=1000, PDITM="ITEM003", PDDSC1="Widget C",
             PDUORG=100, PDUREC=0, PDPRRC=500000, PDCRCD="   ", PDAEXP=500000, PDPDDJ=124060, PDLTTR="520",
             PDNXTR="520", PDFRRC=0, PDFEA=3000000),
        dict(PDDOCO=1003, PDKCOO="00001", PDLNID=1000, PDITM="ITEM001", PDDSC1="Raw Material A",
             PDUORG=100, PDUREC=100, PDPRRC=10000, PDCRCD="USD", PDAEXP=1000, PDPDDJ=124020, PDLTTR="999",
             PDNXTR="999", PDFRRC=0, PDFEA=0),
    ],
    "F43121": [
        dict(PRDOCO=1001, PRLNID=1000, PRDOC=7001, PRITM="ITEM001", PRRCDJ=124050, PRUREC=500,
             PRPRRC=125000, PRCRCD="USD", PRLOCN="A-01", PRLOTN="LOT-9"),
    ],
    "F4211": [
        dict(SDDOCO=4001, SDLNID=1000, SDITM="ITEM001", SDAN8=6001, SDUORG=200, SDSOQS=100,
             SDUPRC=250000, SDCRCD="USD", SDPDDJ=124060, SDNXTR="999"),
        dict(SDDOCO=4001, SDLNID=2000, SDITM="ITEM002", SDAN8=6001, SDUORG=50, SDSOQS=0,
             SDUPRC=150000, SDCRCD="JPY", SDPDDJ=None, SDNXTR="520"),
    ],
    "F3411": [
        dict(MMITM="ITEM001", MMMSGT="O", MMDRQJ=124040, MMDSC1="Order item ITEM001", MMUORG=5000,
             MMPRTY=1, MMMSGA="N"),
        dict(MMITM="ITEM002", MMMSGT="E", MMDRQJ=124041, MMDSC1="Expedite ITEM002", MMUORG=1250,
             MMPRTY=2, MMMSGA="N"),
    ],
    "F4209": [dict(HODOCO=1001, HORPER=9001, HOARTG="PO_APPR")],
    "F0101": [
        dict(ABAN8=5001, ABALPH="Acme Supply", ABAT1="1 Main St", ABAT2="Springfield", ABAT3=None, ABAT4=""),
        dict(ABAN8=9001, ABALPH="Jane Approver", ABAT1=None, ABAT2=None, ABAT3=None, ABAT4=None),
    ],
}


def build_legacy_engine(
    *,
    drop_tables: tuple[str, ...] = (),
    drop_columns: dict[str, tuple[str, ...]] | None = None,
    rows: dict[str, list[dict]] | None = None,
) -> Engine:
    """In-memory stand-in for the JDE database, optionally with tables/columns removed."""
    drop_columns = drop_columns or {}
    rows = LEGACY_ROWS if rows is None else rows
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        for table, columns in LEGACY_SCHEMA.items():
            if table in drop_tables:
                continue
            kept = [(name, kind) for name, kind in columns if name not in drop_columns.get(table, ())]
            conn.execute(text(f"CREATE TABLE {table} ({', '.join(f'{n} {k}' for n, k in kept)})"))
            names = [name for name, _ in kept]
            for row in rows.get(table, []):
                values = {name: row.get(name) for name in names}
                placeholders = ", ".join(f":{name}" for name in names)
                conn.execute(text(f"INSERT INTO {table} ({', '.join(names)}) VALUES ({placeholders})"), values)
    return engine


def make_connector(engine: Engine, **kwargs) -> ErpConnector:
    config = ConnectionConfig(host="jde-test", port=1521, service_name="JDE", user="jde", password="x", url="sqlite://")
    manager = ConnectionManager(config, call_timeout_ms=0, engine_factory=lambda url: engine)
    return ErpConnector(manager, **kwargs)


def make_unreachable_connector() -> ErpConnector:
    """Connector whose handshake always fails (database file cannot be opened)."""
    config = ConnectionConfig(
        host="jde-down",
        port=1521,
        service_name="JDE",
        user="jde",
        password="x",
        url="sqlite:////nonexistent-dir/jde/unreachable.db",
    )
    return ErpConnector(ConnectionManager(config, call_timeout_ms=0))


@pytest.fixture
def legacy_engine() -> Iterator[Engine]:
    engine = build_legacy_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def connector(legacy_engine: Engine) -> Iterator[ErpConnector]:
    conn = make_connector(legacy_engine)
    yield conn
    conn.disconnect()


@pytest.fixture
def unreachable_connector() -> ErpConnector:
    return make_unreachable_connector()


@pytest.fixture
def flask_app(connector: ErpConnector) -> Iterator[Flask]:
    app = create_app("testing")
    app.extensions["erp_connector"] = connector
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
