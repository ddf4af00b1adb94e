"""A registry of named data sources."""

from __future__ import annotations

import logging
import threading
from typing import Any

from sqlrepokit.config import Config
from sqlrepokit.datasource import DataSource, open_datasource

log = logging.getLogger(__name__)


class DataSourceNotFoundError(LookupError):
    """Raised when no data source is registered under a name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"database instance not found: {name}")
        self.name = name


class Manager:
    """Holds open data sources by name."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._instances: dict[str, DataSource] = {}

    def register(self, name: str, config: Config, **kwargs: Any) -> None:
        """Open a data source from ``config`` and store it under ``name``.

        Keyword arguments are passed on to ``open_datasource``.
        """
        datasource = open_datasource(config, **kwargs)
        with self._lock:
            self._instances[name] = datasource

    def get(self, name: str) -> DataSource:
        """Return the data source registered under ``name``."""
        with self._lock:
            try:
                return self._instances[name]
            except KeyError:
                raise DataSourceNotFoundError(name) from None

    def close_all(self) -> None:
        """Close every data source; failures are logged, not raised."""
        with self._lock:
            for name, datasource in self._instances.items():
                try:
                    datasource.close()
                except Exception as exc:
                    log.error("failed to close db [%s]: %s", name, exc)