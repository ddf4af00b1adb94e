"""Opening database connections from a Config."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import Session

from sqlrepokit.config import Config

log = logging.getLogger(__name__)


class UnsupportedDriverError(ValueError):
    """Raised when no connection URL can be built for a driver."""

    def __init__(self, driver: str) -> None:
        super().__init__(f"unsupported driver: {driver}")
        self.driver = driver


class DSNBuilder(ABC):
    """Turns a Config into a connection URL."""

    @abstractmethod
    def build(self, config: Config) -> URL | str:
        """Return the URL to connect with."""


def _parse_port(port: str) -> int | None:
    if not port:
        return None
    if not port.isdigit():
        raise ValueError(f"invalid port: {port!r}")
    return int(port)


class DefaultDSNBuilder(DSNBuilder):
    """Builds URLs for the ``postgres`` and ``mysql`` drivers."""

    def build(self, config: Config) -> URL:
        if config.driver == "postgres":
            return URL.create(
                "postgresql",
                username=config.user,
                password=config.password,
                host=config.host,
                port=_parse_port(config.port),
                database=config.dbname,
                query={
                    "options": f"-csearch_path={config.schema}",
                    "sslmode": config.sslmode,
                },
            )
        if config.driver == "mysql":
            return URL.create(
                "mysql+pymysql",
                username=config.user,
                password=config.password,
                host=config.host,
                port=_parse_port(config.port),
                database=config.dbname,
                query={"charset": "utf8mb4"},
            )
        raise UnsupportedDriverError(config.driver)


class DataSource:
    """An open database connection pool."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def session(self) -> Session:
        """Start a new ORM session on this data source."""
        if self._closed:
            raise RuntimeError("database is closed")
        return Session(self.engine)

    def close(self) -> None:
        """Release every pooled connection."""
        self.engine.dispose()
        self._closed = True

    def __enter__(self) -> DataSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_datasource(
    config: Config,
    *,
    dsn_builder: DSNBuilder | None = None,
    url: URL | str | None = None,
    engine_options: Mapping[str, Any] | None = None,
    debug: bool | None = None,
) -> DataSource:
    """Connect to the database described by ``config`` and check it answers.

    ``url`` takes precedence over ``dsn_builder``; ``debug`` overrides ``config.debug``.
    """
    if url is None:
        builder = dsn_builder if dsn_builder is not None else DefaultDSNBuilder()
        try:
            url = builder.build(config)
        except Exception as exc:
            log.error("failed to build DSN: %s", exc)
            raise

    debug_mode = config.debug if debug is None else debug
    options = dict(engine_options or {})
    if debug_mode:
        options.setdefault("echo", True)

    try:
        engine = create_engine(url, **options)
    except Exception as exc:
        log.error("failed to connect database: %s", exc)
        raise

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception:
        engine.dispose()
        raise

    if debug_mode:
        log.info("debug mode is enabled")
    log.info("Successfully connected to database")
    return DataSource(engine)