"""Connection settings for a data source, with environment-driven defaults."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

_ENV_PREFIX = "database"

_DEFAULTS = {
    "host": "localhost",
    "port": "5432",
    "user": "postgres",
    "password": "password",
    "dbname": "postgres",
    "schema": "public",
    "sslmode": "disable",
    "driver": "postgres",
}
_DEFAULT_DEBUG = True

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})


@dataclass
class Config:
    """Settings needed to open a database connection."""

    host: str = ""
    port: str = ""
    user: str = ""
    password: str = ""
    dbname: str = ""
    schema: str = ""
    sslmode: str = ""
    debug: bool = False
    driver: str = ""


def _env_key(key: str) -> str:
    return f"{_ENV_PREFIX}.{key}".replace(".", "_").upper()


def _lookup(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(_env_key(key))
    # Empty variables count as unset.
    return value if value else None


def default_config(environ: Mapping[str, str] | None = None) -> Config:
    """Build a Config from ``DATABASE_*`` environment variables over built-in defaults."""
    env = os.environ if environ is None else environ
    values = {}
    for key, default in _DEFAULTS.items():
        found = _lookup(env, key)
        values[key] = default if found is None else found
    raw_debug = _lookup(env, "debug")
    debug = _DEFAULT_DEBUG if raw_debug is None else raw_debug in _TRUE_WORDS
    return Config(debug=debug, **values)