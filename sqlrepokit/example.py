"""A sample user model and repository, runnable as a small demonstration."""

from __future__ import annotations

import argparse
import sys
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Integer, String, Uuid
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from sqlrepokit.config import Config
from sqlrepokit.datasource import DataSource, open_datasource
from sqlrepokit.query_methods import query
from sqlrepokit.repository import Repository

_SAMPLE_ID = "78c83478-5e15-4720-9acb-b70ab32f011b"


class _Base(DeclarativeBase):
    pass


class UserModel(_Base):
    """A user row in ``user_tbl``."""

    __tablename__ = "user_tbl"

    id: Mapped[uuid.UUID] = mapped_column("id", Uuid, primary_key=True)
    partner_id: Mapped[str] = mapped_column("partner_id", String(255), default="")
    total: Mapped[int] = mapped_column("total", Integer, default=0)
    user_name: Mapped[str] = mapped_column("user_name", String(255), default="")
    first_name: Mapped[str] = mapped_column("first_name", String(255), default="")
    last_name: Mapped[str] = mapped_column("last_name", String(255), default="")
    email: Mapped[str] = mapped_column("email", String(255), default="")
    status: Mapped[str] = mapped_column("status", String(255), default="")
    created_at: Mapped[datetime | None] = mapped_column("created_at", DateTime, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column("updated_at", DateTime, nullable=True)

    def before_create(self) -> None:
        """Assign a fresh identifier and the creation time."""
        self.id = uuid.uuid4()
        self.created_at = datetime.now()

    def before_update(self) -> None:
        """Record the update time."""
        self.updated_at = datetime.now()

    def __repr__(self) -> str:
        return (
            f"UserModel(id={self.id!r}, user_name={self.user_name!r}, "
            f"email={self.email!r}, status={self.status!r})"
        )


class UserRepository(Repository):
    """Repository of users with finders derived from their names."""

    def __init__(self, datasource: DataSource) -> None:
        super().__init__(datasource, UserModel)
        self.fill_func_fields(self)

    @query
    def find_by_user_name(self, username):
        """The first user with ``username``."""
        return self.select_one("(user_name = ?)", username)

    @query
    def find_by_user_name_and_email_or_partner_id(self, username, email, partner_id):
        """The first user matching username and email, or the partner id."""
        return self.select_one(
            "(user_name = ? AND email = ?) OR (partner_id = ?)",
            username,
            email,
            partner_id,
        )

    @query
    def find_all_by_email_order_by_id_desc_limit10(self, email):
        """Up to ten users with ``email``, newest identifier first."""
        users = self.select("(email = ?)", email)
        return sorted(users, key=lambda user: user.id, reverse=True)[:10]


def _report(label: str, call: Callable[[], Any]) -> None:
    try:
        result = call()
    except SQLAlchemyError as exc:
        print(f"{label}: error: {exc}")
    else:
        print(f"{label}: {result!r}")


def main(argv: list[str] | None = None) -> int:
    """Connect, run a few repository queries and print their outcome."""
    parser = argparse.ArgumentParser(description="Run sample user repository queries.")
    parser.add_argument("--url", help="connection URL overriding the built-in settings")
    parser.add_argument("--no-debug", action="store_true", help="do not echo SQL statements")
    args = parser.parse_args(argv)

    password = "password"
    config = Config(
        host="localhost",
        port="5432",
        user="keycloak",
        password=password,
        dbname="keycloak",
        schema="public",
        debug=not args.no_debug,
        sslmode="disable",
        driver="postgres",
    )
    try:
        datasource = open_datasource(config, url=args.url)
    except (SQLAlchemyError, ValueError, ImportError) as exc:
        print(f"failed to open database: {exc}", file=sys.stderr)
        return 1

    with datasource:
        repository = UserRepository(datasource)
        _report("find_by_id", lambda: repository.find_by_id(uuid.UUID(_SAMPLE_ID)))
        _report("exists", lambda: repository.exists("user_name = ?", "123"))
        _report("count_by", lambda: repository.count_by("user_name = ?", "123"))
        _report("find_by_user_name", lambda: repository.find_by_user_name("123"))

    print("Repository methods injected successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())