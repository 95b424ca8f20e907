"""Pooled access to the legacy JDE database.

One engine (and so one connection pool) is created lazily per manager and
reused for its lifetime. Every query checks a connection out of the pool and
returns it when done, so a manager can be shared across request threads.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine, URL, make_url
from sqlalchemy.exc import SQLAlchemyError

from .errors import ErpConnectionError
from .records import ConnectionConfig

logger = logging.getLogger(__name__)

PROBE_SQL = {
    "oracle": "SELECT 1 FROM DUAL",
}
DEFAULT_PROBE_SQL = "SELECT 1"

EngineFactory = Callable[..., Engine]


def build_url(config: ConnectionConfig) -> URL:
    if config.url:
        return make_url(config.url)
    return URL.create(
        "oracle+oracledb",
        username=config.user,
        password=config.password,
        host=config.host,
        port=config.port,
        query={"service_name": config.service_name},
    )


class ConnectionManager:
    """Lazily creates one pooled engine; hands out per-call connections."""

    def __init__(
        self,
        config: ConnectionConfig,
        *,
        pool_size: int = 4,
        pool_timeout: int = 30,
        call_timeout_ms: int = 30000,
        engine_factory: EngineFactory | None = None,
    ):
        self.config = config
        self.pool_size = pool_size
        self.pool_timeout = pool_timeout
        self.call_timeout_ms = call_timeout_ms
        self._engine_factory = engine_factory
        self._engine: Engine | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_app_config(cls, cfg, **kwargs) -> "ConnectionManager":
        return cls(
            ConnectionConfig.from_mapping(cfg),
            pool_size=int(cfg.get("ERP_POOL_SIZE", 4)),
            pool_timeout=int(cfg.get("ERP_POOL_TIMEOUT", 30)),
            call_timeout_ms=int(cfg.get("ERP_CALL_TIMEOUT_MS", 30000)),
            **kwargs,
        )

    @property
    def connected(self) -> bool:
        return self._engine is not None

    @property
    def dialect(self) -> str:
        return self.connect().dialect.name

    def _create_engine(self) -> Engine:
        url = build_url(self.config)
        if self._engine_factory is not None:
            return self._engine_factory(url)
        kwargs: dict = {"pool_pre_ping": True}
        if url.get_backend_name() != "sqlite":
            kwargs.update(pool_size=self.pool_size, pool_timeout=self.pool_timeout)
        return create_engine(url, **kwargs)

    def connect(self) -> Engine:
        """Return the shared engine, creating it (and handshaking once) on first use."""
        if self._engine is not None:
            return self._engine
        with self._lock:
            if self._engine is not None:
                return self._engine
            try:
                engine = self._create_engine()
                with engine.connect():
                    pass
            except (SQLAlchemyError, OSError) as exc:
                logger.error(
                    "Failed to connect to JDE database %s:%s/%s: %s",
                    self.config.host,
                    self.config.port,
                    self.config.service_name,
                    exc,
                )
                raise ErpConnectionError(f"Unable to connect to JDE database: {exc}") from exc
            self._engine = engine
            logger.info("JDE engine ready (%s, env=%s)", engine.dialect.name, self.config.environment)
            return engine

    def _apply_call_timeout(self, conn: Connection) -> None:
        if not self.call_timeout_ms:
            return
        driver_conn = getattr(conn.connection, "driver_connection", None)
        if driver_conn is not None and hasattr(driver_conn, "call_timeout"):
            driver_conn.call_timeout = int(self.call_timeout_ms)

    @contextmanager
    def checkout(self) -> Iterator[Connection]:
        """Borrow a pooled connection for one call; always returned to the pool."""
        engine = self.connect()
        try:
            conn = engine.connect()
        except SQLAlchemyError as exc:
            # DBAPIError from the driver, TimeoutError when the pool is exhausted
            raise ErpConnectionError(f"Unable to acquire JDE connection: {exc}") from exc
        try:
            self._apply_call_timeout(conn)
            yield conn
        finally:
            conn.close()

    def test_connection(self) -> bool:
        """Run a trivial probe; True only when it returns at least one row."""
        try:
            with self.checkout() as conn:
                sql = PROBE_SQL.get(conn.dialect.name, DEFAULT_PROBE_SQL)
                rows = conn.execute(text(sql)).fetchall()
        except (ErpConnectionError, SQLAlchemyError) as exc:
            logger.warning("JDE connection test failed: %s", exc)
            return False
        return len(rows) > 0

    def disconnect(self) -> None:
        """Dispose the pool and forget the engine; safe when never connected."""
        with self._lock:
            engine, self._engine = self._engine, None
        if engine is None:
            return
        try:
            engine.dispose()
        except SQLAlchemyError:
            logger.exception("Error closing JDE connection pool")


__all__ = ["ConnectionManager", "build_url", "PROBE_SQL"]
