"""Test doubles and seed helpers."""

import copy
from datetime import datetime, timedelta, timezone
from contextlib import asynccontextmanager

from sqlalchemy.pool import NullPool

from pricebook.constants.operations import Role
from pricebook.core.db import build_engine
from pricebook.core.exceptions import ConflictError, TransportError

UNIQUE_KEYS = {
    "products": ("code",),
    "profiles": ("id", "email"),
    "user_roles": ("user_id",),
    "user_permissions": ("user_id",),
    "price_history": ("id",),
}


class InMemoryDataService:
    def __init__(self):
        self.tables = {name: [] for name in UNIQUE_KEYS}
        self.fail_on: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str]] = []
        self._next_id = 1

    def _check(self, op, table):
        self.calls.append((op, table))
        if (op, table) in self.fail_on:
            raise TransportError(f"{op} on {table} failed")

    async def select(self, table, filters=None, order_by=None):
        self._check("select", table)
        rows = [
            dict(r)
            for r in self.tables[table]
            if all(r.get(k) == v for k, v in (filters or {}).items())
        ]
        for key in reversed(list(order_by or ())):
            column = key.lstrip("-")
            rows.sort(key=lambda r: r[column], reverse=key.startswith("-"))
        return rows

    async def insert(self, table, row):
        self._check("insert", table)
        row = dict(row)
        if table == "price_history":
            row["id"] = self._next_id
            self._next_id += 1
        for key in UNIQUE_KEYS[table]:
            if any(r.get(key) == row.get(key) for r in self.tables[table]):
                raise ConflictError("Database constraint violation")
        self.tables[table].append(row)
        return dict(row)

    async def update(self, table, filters, values):
        self._check("update", table)
        count = 0
        for r in self.tables[table]:
            if all(r.get(k) == v for k, v in filters.items()):
                r.update(values)
                count += 1
        return count

    @asynccontextmanager
    async def transaction(self):
        snapshot = copy.deepcopy(self.tables)
        try:
            yield self
        except BaseException:
            self.tables = snapshot
            raise


class StepClock:
    """Each call returns a time one second after the previous one."""

    def __init__(self, start=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        self.current += timedelta(seconds=1)
        return self.current


async def make_user(
    data,
    user_id,
    *,
    email=None,
    full_name="",
    role=Role.USER,
    password_hash="not-a-real-hash",
    **flags,
):
    """Insert a profile with its role and permission rows, skipping bcrypt."""
    await data.insert(
        "profiles",
        {
            "id": user_id,
            "email": email or f"{user_id}@example.com",
            "full_name": full_name,
            "password_hash": password_hash,
        },
    )
    await data.insert("user_roles", {"user_id": user_id, "role": role})
    await data.insert(
        "user_permissions",
        {
            "user_id": user_id,
            "can_add": flags.get("can_add", False),
            "can_edit": flags.get("can_edit", False),
            "can_delete": flags.get("can_delete", False),
            "is_blocked": flags.get("is_blocked", False),
        },
    )


def make_engine(path):
    return build_engine(f"sqlite+aiosqlite:///{path}", "sqlite", poolclass=NullPool)
