"""Extract -> upsert -> audit pipeline for the local store.

One run handles one record type. The whole extraction is upserted in a single
transaction keyed by natural identifier, then exactly one ``DataSyncLog`` row
is written describing the outcome. Failed runs roll back everything and log
zero counts; nothing retries automatically.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError

from .. import db
from ..models import now_local_naive
from ..models.erp import ErpInventoryLevel, ErpItemMaster, ErpPurchaseOrder
from ..models.log import DataSyncLog
from .errors import ErpError, SyncError
from .results import QueryResult

logger = logging.getLogger(__name__)


class SyncType(str, Enum):
    ITEM_MASTER = "item_master"
    PURCHASE_ORDERS = "purchase_orders"
    INVENTORY_LEVELS = "inventory_levels"

    @classmethod
    def parse(cls, value) -> "SyncType":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip()
        alias = _ALIASES.get(key) or _ALIASES.get(key.lower())
        if alias is None:
            raise SyncError(f"Unknown sync type: {value!r}")
        return alias


_ALIASES = {
    "item_master": SyncType.ITEM_MASTER,
    "itemMaster": SyncType.ITEM_MASTER,
    "itemmaster": SyncType.ITEM_MASTER,
    "purchase_orders": SyncType.PURCHASE_ORDERS,
    "purchaseOrders": SyncType.PURCHASE_ORDERS,
    "purchaseorders": SyncType.PURCHASE_ORDERS,
    "inventory_levels": SyncType.INVENTORY_LEVELS,
    "inventoryLevels": SyncType.INVENTORY_LEVELS,
    "inventorylevels": SyncType.INVENTORY_LEVELS,
}


@dataclass(frozen=True)
class SyncTarget:
    model: type
    key: str
    extract: Callable[[object], QueryResult]


SYNC_TARGETS: dict[SyncType, SyncTarget] = {
    SyncType.ITEM_MASTER: SyncTarget(
        ErpItemMaster, "item_number", lambda connector: connector.get_item_master(row_cap=0)
    ),
    SyncType.PURCHASE_ORDERS: SyncTarget(
        ErpPurchaseOrder, "po_number", lambda connector: connector.get_purchase_orders()
    ),
    SyncType.INVENTORY_LEVELS: SyncTarget(
        ErpInventoryLevel, "item_number", lambda connector: connector.get_all_inventory_items()
    ),
}


@dataclass(frozen=True)
class SyncSummary:
    success: bool
    message: str
    sync_type: str
    records_processed: int = 0
    records_failed: int = 0
    log_id: int | None = None

    def as_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "sync_type": self.sync_type,
            "records_processed": self.records_processed,
            "records_failed": self.records_failed,
            "log_id": self.log_id,
        }


def _column_names(model) -> set[str]:
    return {col.key for col in sa_inspect(model).column_attrs}


def upsert_records(session, model, key: str, records) -> tuple[int, int]:
    """Insert-or-update each record by natural key. Returns (processed, skipped)."""
    columns = _column_names(model) - {"synced_at"}
    synced_at = now_local_naive()
    processed = 0
    skipped = 0
    seen: set[str] = set()
    for record in records:
        values = {k: v for k, v in record.as_dict().items() if k in columns}
        natural_key = values.get(key)
        if not natural_key or natural_key in seen:
            skipped += 1
            continue
        seen.add(natural_key)
        row = session.get(model, natural_key)
        if row is None:
            row = model(**values)
            session.add(row)
        else:
            for attr, value in values.items():
                if attr != key:
                    setattr(row, attr, value)
        row.synced_at = synced_at
        processed += 1
    return processed, skipped


def sync_to_local_store(connector, record_type, *, session=None) -> SyncSummary:
    """Run one full extraction of ``record_type`` into the local store.

    A degraded or failed extraction (mock data, every query shape failing)
    aborts the run, so substitutes never reach the local copy.
    """
    session = session or db.session
    start_time = now_local_naive()
    label = str(getattr(record_type, "value", record_type))

    try:
        sync_type = SyncType.parse(record_type)
        label = sync_type.value
        target = SYNC_TARGETS[sync_type]

        result = target.extract(connector)
        if result.failed:
            raise SyncError(f"{label} extraction failed: {result.reason or 'legacy query failed'}")

        processed, skipped = upsert_records(session, target.model, target.key, result.records)
        session.commit()
    except Exception as exc:
        session.rollback()
        if isinstance(exc, ErpError):
            logger.error("Sync %s failed: %s", label, exc)
        else:
            logger.exception("Sync %s failed", label)
        entry = _write_log(session, label, "failed", start_time, error_message=str(exc))
        return SyncSummary(False, f"Sync failed: {exc}", label, log_id=getattr(entry, "id", None))

    entry = _write_log(
        session,
        label,
        "success",
        start_time,
        records_processed=processed,
        records_failed=skipped,
    )
    message = f"Synced {processed} {label} record(s)"
    if skipped:
        message += f", skipped {skipped} without a usable key"
    logger.info("%s", message)
    return SyncSummary(True, message, label, processed, skipped, log_id=getattr(entry, "id", None))


def _write_log(session, sync_type: str, status: str, start_time, **fields):
    try:
        return DataSyncLog.record(
            session,
            sync_type=sync_type,
            status=status,
            start_time=start_time,
            end_time=now_local_naive(),
            **fields,
        )
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Could not write sync log entry for %s", sync_type)
        return None


__all__ = [
    "SYNC_TARGETS",
    "SyncSummary",
    "SyncType",
    "sync_to_local_store",
    "upsert_records",
]
