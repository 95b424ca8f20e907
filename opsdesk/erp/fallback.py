"""Ordered query-variant execution.

A domain query is a list of ``QueryVariant`` objects, richest first. The
chain runs them through a small state machine::

    TRY_VARIANT(i) -> SUCCESS
                   -> NEXT_VARIANT -> TRY_VARIANT(i + 1) | ALL_FAILED
                   -> ALL_FAILED            (connection fault)

Structural failures (unknown column/table, malformed result) and misses on
variants that require rows move to the next variant. Connection faults end
the chain at once since every remaining variant would hit the same wall.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from .errors import ErpConnectionError, QueryError, is_structural_error

logger = logging.getLogger(__name__)

_BIND_RE = re.compile(r"(?<!:):([A-Za-z_][A-Za-z0-9_]*)")


class ChainState(str, Enum):
    TRY_VARIANT = "try_variant"
    NEXT_VARIANT = "next_variant"
    SUCCESS = "success"
    ALL_FAILED = "all_failed"


@dataclass(frozen=True)
class QueryVariant:
    name: str
    sql: str
    # An empty result means "wrong shape" when the caller asked for a key that should exist.
    require_rows: bool = False
    # Columns every returned row must carry; missing ones make the result malformed.
    required_columns: tuple[str, ...] = ()

    @property
    def bind_names(self) -> frozenset[str]:
        return frozenset(_BIND_RE.findall(self.sql))

    def bind_params(self, params: Mapping[str, object]) -> dict[str, object]:
        names = self.bind_names
        return {key: value for key, value in params.items() if key in names}

    def validate(self, rows: list[dict]) -> None:
        if not rows or not self.required_columns:
            return
        missing = [col for col in self.required_columns if col not in rows[0]]
        if missing:
            raise QueryError(self.name, f"result missing columns {', '.join(missing)}")


@dataclass(frozen=True)
class VariantAttempt:
    variant: str
    state: ChainState
    row_count: int = 0
    error: str | None = None


@dataclass(frozen=True)
class ChainOutcome:
    state: ChainState
    variant: str | None = None
    rows: tuple[dict, ...] = ()
    attempts: tuple[VariantAttempt, ...] = field(default_factory=tuple)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is ChainState.SUCCESS

    @property
    def attempted(self) -> list[str]:
        return [attempt.variant for attempt in self.attempts]


def fetch_rows(conn: Connection, sql: str, params: Mapping[str, object] | None = None) -> list[dict]:
    """Execute and return rows as dicts keyed by upper-case column name."""
    result = conn.execute(text(sql), dict(params or {}))
    return [
        {str(key).upper(): value for key, value in row.items()}
        for row in result.mappings().all()
    ]


def run_chain(connections, variants: Sequence[QueryVariant], params: Mapping[str, object] | None = None, *, label: str = "query") -> ChainOutcome:
    params = dict(params or {})
    attempts: list[VariantAttempt] = []
    if not variants:
        return ChainOutcome(ChainState.ALL_FAILED, error="no query variants defined")

    try:
        with connections.checkout() as conn:
            index = 0
            state = ChainState.TRY_VARIANT
            while state is ChainState.TRY_VARIANT:
                variant = variants[index]
                is_last = index == len(variants) - 1
                try:
                    rows = fetch_rows(conn, variant.sql, variant.bind_params(params))
                    variant.validate(rows)
                except (DBAPIError, QueryError) as exc:
                    if not is_structural_error(exc):
                        attempts.append(VariantAttempt(variant.name, ChainState.ALL_FAILED, error=str(exc)))
                        logger.error("%s: variant %s hit a connection fault: %s", label, variant.name, exc)
                        return ChainOutcome(ChainState.ALL_FAILED, attempts=tuple(attempts), error=str(exc))
                    attempts.append(VariantAttempt(variant.name, ChainState.NEXT_VARIANT, error=str(exc)))
                    logger.info("%s: variant %s failed structurally, trying next shape (%s)", label, variant.name, exc)
                    conn.rollback()
                    state = ChainState.NEXT_VARIANT
                except SQLAlchemyError as exc:
                    attempts.append(VariantAttempt(variant.name, ChainState.NEXT_VARIANT, error=str(exc)))
                    logger.info("%s: variant %s returned a malformed result (%s)", label, variant.name, exc)
                    conn.rollback()
                    state = ChainState.NEXT_VARIANT
                else:
                    if not rows and variant.require_rows and not is_last:
                        attempts.append(VariantAttempt(variant.name, ChainState.NEXT_VARIANT))
                        logger.info("%s: no rows from variant %s, trying next shape", label, variant.name)
                        state = ChainState.NEXT_VARIANT
                    else:
                        attempts.append(VariantAttempt(variant.name, ChainState.SUCCESS, row_count=len(rows)))
                        return ChainOutcome(ChainState.SUCCESS, variant=variant.name, rows=tuple(rows), attempts=tuple(attempts))

                if state is ChainState.NEXT_VARIANT:
                    index += 1
                    if index >= len(variants):
                        break
                    state = ChainState.TRY_VARIANT
    except ErpConnectionError as exc:
        logger.error("%s: JDE connection unavailable: %s", label, exc)
        return ChainOutcome(ChainState.ALL_FAILED, attempts=tuple(attempts), error=str(exc))

    last_error = next((a.error for a in reversed(attempts) if a.error), None)
    return ChainOutcome(
        ChainState.ALL_FAILED,
        attempts=tuple(attempts),
        error=last_error or "all query variants failed",
    )


__all__ = [
    "ChainOutcome",
    "ChainState",
    "QueryVariant",
    "VariantAttempt",
    "fetch_rows",
    "run_chain",
]
