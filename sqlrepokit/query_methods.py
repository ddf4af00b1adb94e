"""Derive queries from method names such as ``FindByUserNameOrderByIDDesc``."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

F = TypeVar("F", bound=Callable)

FIND_PREFIX = "FindBy"
FIND_ALL_PREFIX = "FindAllBy"
QUERY_NAME_ATTR = "repo_query_name"

_LIMIT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass
class QueryParts:
    """The pieces of a query derived from a method name."""

    where_clauses: list[str] = field(default_factory=list)
    order_by: str = ""
    limit: int = 0


def to_snake_case(s: str) -> str:
    """Convert CamelCase to snake_case, keeping acronyms together (URLString -> url_string)."""
    result = []
    for i, ch in enumerate(s):
        if ch.isupper():
            prev_lower = i > 0 and s[i - 1].islower()
            next_lower = i + 1 < len(s) and s[i + 1].islower()
            if i > 0 and (prev_lower or next_lower):
                result.append("_")
            result.append(ch.lower())
        else:
            result.append(ch)
    return "".join(result)


def parse_order_by(s: str) -> tuple[str, str]:
    """Split a trailing ``Desc``/``Asc`` off a field name; ascending by default."""
    if s.endswith("Desc"):
        return s[: -len("Desc")], "DESC"
    if s.endswith("Asc"):
        return s[: -len("Asc")], "ASC"
    return s, "ASC"


def parse_method_name(method_name: str) -> QueryParts:
    """Parse a ``FindBy...`` name into where clauses, ordering and limit."""
    if not method_name.startswith(FIND_PREFIX):
        raise ValueError(f"method name must start with {FIND_PREFIX}")
    rest = method_name[len(FIND_PREFIX):]
    parts = QueryParts()

    conditions, found, order_part = rest.partition("OrderBy")
    if not found:
        order_part = ""

    order_part, found, limit_part = order_part.partition("Limit")
    if not found:
        limit_part = ""

    if order_part:
        name, direction = parse_order_by(order_part)
        parts.order_by = f"{to_snake_case(name)} {direction}"

    if limit_part:
        if not _LIMIT_RE.fullmatch(limit_part):
            raise ValueError(f"invalid limit number: {limit_part!r}")
        parts.limit = int(limit_part)

    parts.where_clauses = [
        "(" + " AND ".join(f"{to_snake_case(name)} = ?" for name in group.split("And")) + ")"
        for group in conditions.split("Or")
    ]
    return parts


def build_where_clause(parts: QueryParts) -> str:
    """Join the where clauses of ``parts`` with OR."""
    return " OR ".join(parts.where_clauses)


def _camelize(name: str) -> str:
    return "".join(piece[:1].upper() + piece[1:] for piece in name.split("_"))


def query(func: F) -> F:
    """Mark a repository method whose body is derived from its name.

    The CamelCase form of the name is stored on the function as ``repo_query_name``.
    """
    setattr(func, QUERY_NAME_ATTR, _camelize(func.__name__))
    return func