"""A generic repository over one mapped model, with name-derived finder methods."""

from __future__ import annotations

import functools
import itertools
import re
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select, text
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import TextClause

from sqlrepokit.datasource import DataSource
from sqlrepokit.query_methods import (
    FIND_ALL_PREFIX,
    FIND_PREFIX,
    QUERY_NAME_ATTR,
    build_where_clause,
    parse_method_name,
)

T = TypeVar("T")
ID = TypeVar("ID")

_PLACEHOLDER = re.compile(r"\?")
_MISSING = object()


@dataclass
class Page(Generic[T]):
    """One page of query results together with the total match count."""

    items: list[T] = field(default_factory=list)
    total_count: int = 0
    page: int = 0
    page_size: int = 0


def _bind(clause: str, args: Sequence[Any]) -> TextClause:
    """Turn a ``?``-placeholder SQL fragment into a text clause with bound values."""
    counter = itertools.count()
    sql = _PLACEHOLDER.sub(lambda _match: f":p{next(counter)}", clause)
    used = next(counter)
    if used != len(args):
        raise ValueError(
            f"query has {used} placeholders but {len(args)} arguments were given"
        )
    return text(sql).bindparams(**{f"p{i}": value for i, value in enumerate(args)})


def _where(condition: Any, args: Sequence[Any]) -> Any:
    if isinstance(condition, str):
        return _bind(condition, args)
    if args:
        raise TypeError("arguments are only accepted with a string condition")
    return condition


def _call_hook(entity: Any, name: str) -> None:
    hook = getattr(entity, name, None)
    if callable(hook):
        hook()


def _parameters(method: Callable[..., Any], name: str) -> tuple[list[str], dict[str, Any]]:
    """Return the names after ``self`` of ``method`` and the defaults among them."""
    code = getattr(method, "__code__", None)
    if code is None or code.co_argcount == 0:
        raise TypeError(f"method {name} must take self as its first parameter")
    names = list(code.co_varnames[1 : code.co_argcount])
    defaults = getattr(method, "__defaults__", None) or ()
    with_defaults = dict(zip(names[len(names) - len(defaults) :], defaults)) if defaults else {}
    return names, with_defaults


def _collect_arguments(
    name: str,
    names: list[str],
    defaults: dict[str, Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> list[Any]:
    if len(args) > len(names):
        raise TypeError(
            f"{name} takes {len(names)} arguments but {len(args)} were given"
        )
    remaining = dict(kwargs)
    values = list(args)
    for param in names[len(args) :]:
        value = remaining.pop(param, defaults.get(param, _MISSING))
        if value is _MISSING:
            raise TypeError(f"{name} missing required argument: {param!r}")
        values.append(value)
    for param in names[: len(args)]:
        if param in remaining:
            raise TypeError(f"{name} got multiple values for argument {param!r}")
    if remaining:
        unexpected = next(iter(remaining))
        raise TypeError(f"{name} got an unexpected keyword argument {unexpected!r}")
    return values


class Repository(Generic[T, ID]):
    """Common create, read, update and delete operations for ``model``."""

    def __init__(self, datasource: DataSource, model: type[T]) -> None:
        self.datasource = datasource
        self.model = model

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self.datasource.session() as session:
            session.expire_on_commit = False
            yield session

    def _primary_key(self) -> tuple[Any, ...]:
        return tuple(sa_inspect(self.model).primary_key)

    def insert(self, entity: T) -> None:
        """Store a new entity, calling its ``before_create`` hook first."""
        _call_hook(entity, "before_create")
        with self._session() as session:
            session.add(entity)
            session.commit()

    def find_by_id(self, id: ID) -> T:
        """Return the entity with primary key ``id``; raise NoResultFound if absent."""
        with self._session() as session:
            entity = session.get(self.model, id)
        if entity is None:
            raise NoResultFound("record not found")
        return entity

    def select(self, query: Any, *args: Any) -> list[T]:
        """Return every entity matching ``query``."""
        stmt = select(self.model).where(_where(query, args))
        with self._session() as session:
            return list(session.scalars(stmt).all())

    def select_one(self, query: Any, *args: Any) -> T:
        """Return the first entity matching ``query`` by primary key order."""
        stmt = (
            select(self.model)
            .where(_where(query, args))
            .order_by(*self._primary_key())
            .limit(1)
        )
        with self._session() as session:
            entity = session.scalars(stmt).first()
        if entity is None:
            raise NoResultFound("record not found")
        return entity

    def update(self, entity: T) -> None:
        """Save every field of ``entity``, calling its ``before_update`` hook first."""
        _call_hook(entity, "before_update")
        with self._session() as session:
            session.merge(entity)
            session.commit()

    def delete_by_id(self, id: ID) -> None:
        """Delete the entity with primary key ``id``; a missing row is not an error."""
        with self._session() as session:
            entity = session.get(self.model, id)
            if entity is not None:
                session.delete(entity)
                session.commit()

    def list_all(self) -> list[T]:
        """Return every stored entity."""
        with self._session() as session:
            return list(session.scalars(select(self.model)).all())

    def count(self) -> int:
        """Return the number of stored entities."""
        stmt = select(func.count()).select_from(self.model)
        with self._session() as session:
            return int(session.scalar(stmt) or 0)

    def count_by(self, query: Any, *args: Any) -> int:
        """Return the number of entities matching ``query``."""
        stmt = select(func.count()).select_from(self.model).where(_where(query, args))
        with self._session() as session:
            return int(session.scalar(stmt) or 0)

    def raw_query(self, query: str, *args: Any) -> list[T]:
        """Run a full SQL statement and load its rows as entities."""
        stmt = select(self.model).from_statement(_bind(query, args))
        with self._session() as session:
            return list(session.scalars(stmt).all())

    def exists(self, query: str, *args: Any) -> bool:
        """Return whether any row of the model's table matches ``query``."""
        sql = f"SELECT EXISTS(SELECT 1 FROM {self.table_name()} WHERE {query})"
        with self._session() as session:
            return bool(session.scalar(_bind(sql, args)))

    def pageable(self, page: int, page_size: int, query: Any, *args: Any) -> Page[T]:
        """Return page number ``page`` (from 1) of the entities matching ``query``."""
        condition = _where(query, args)
        count_stmt = select(func.count()).select_from(self.model).where(condition)
        stmt = select(self.model).where(condition).limit(page_size)
        offset = (page - 1) * page_size
        if offset > 0:
            stmt = stmt.offset(offset)
        with self._session() as session:
            total = int(session.scalar(count_stmt) or 0)
            items = list(session.scalars(stmt).all())
        return Page(items=items, total_count=total, page=page, page_size=page_size)

    def table_name(self) -> str:
        """Return the name of the table the model is stored in."""
        return sa_inspect(self.model).local_table.name

    def fill_func_fields(self, target: Any) -> None:
        """Give ``target`` working versions of its methods marked with ``@query``.

        Each marked method is replaced on ``target`` by a finder running the
        query derived from its name against this repository.
        """
        declared: dict[str, tuple[Callable[..., Any], str]] = {}
        for klass in reversed(type(target).__mro__):
            for attr, value in vars(klass).items():
                name = getattr(value, QUERY_NAME_ATTR, None)
                if name is not None and callable(value):
                    declared[attr] = (value, name)
                else:
                    declared.pop(attr, None)
        for attr, (method, name) in declared.items():
            setattr(target, attr, self._make_finder(method, name))

    def _make_finder(self, method: Callable[..., Any], name: str) -> Callable[..., Any]:
        if name.startswith(FIND_ALL_PREFIX):
            find_all = True
            parts = parse_method_name(FIND_PREFIX + name[len(FIND_ALL_PREFIX):])
        elif name.startswith(FIND_PREFIX):
            find_all = False
            parts = parse_method_name(name)
        else:
            raise ValueError(
                f"method name {name} must start with {FIND_PREFIX} or {FIND_ALL_PREFIX}"
            )

        names, defaults = _parameters(method, name)
        where = build_where_clause(parts)
        primary_key = self._primary_key()

        @functools.wraps(method)
        def finder(*args: Any, **kwargs: Any) -> Any:
            values = _collect_arguments(name, names, defaults, args, kwargs)
            stmt = select(self.model).where(_bind(where, values))
            if parts.order_by:
                stmt = stmt.order_by(text(parts.order_by))
            with self._session() as session:
                if find_all:
                    if parts.limit > 0:
                        stmt = stmt.limit(parts.limit)
                    return list(session.scalars(stmt).all())
                entity = session.scalars(stmt.order_by(*primary_key).limit(1)).first()
            if entity is None:
                raise NoResultFound("record not found")
            return entity

        return finder