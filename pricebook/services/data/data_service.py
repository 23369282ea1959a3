# pricebook/services/data/data_service.py

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Mapping, Protocol, Sequence

from sqlalchemy import select, insert, update, asc, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pricebook.models import Product, PriceHistory, Profile, UserRole, UserPermission
from pricebook.core.exceptions import ConflictError, TransportError
from pricebook.utils.logger import get_logger

logger = get_logger(__name__)

Row = dict[str, Any]

# Order keys are column names; a leading "-" sorts descending.
OrderBy = Sequence[str]


class DataService(Protocol):
    """Tables reached through equality filters and ordered selects."""

    async def select(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        order_by: OrderBy | None = None,
    ) -> list[Row]: ...

    async def insert(self, table: str, row: Mapping[str, Any]) -> Row: ...

    async def update(
        self,
        table: str,
        filters: Mapping[str, Any],
        values: Mapping[str, Any],
    ) -> int: ...

    def transaction(self): ...


TABLES = {
    "products": Product.__table__,
    "price_history": PriceHistory.__table__,
    "profiles": Profile.__table__,
    "user_roles": UserRole.__table__,
    "user_permissions": UserPermission.__table__,
}


def _normalize(value):
    # SQLite drops tzinfo; every stamp written here is UTC
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_row(mapping) -> Row:
    return {key: _normalize(value) for key, value in mapping.items()}


def _to_storage(mapping) -> Row:
    # SQLite keeps wall-clock time only, so aware values are written as UTC
    return {
        key: value.astimezone(timezone.utc)
        if isinstance(value, datetime) and value.tzinfo is not None
        else value
        for key, value in mapping.items()
    }


class SqlAlchemyDataService:
    """DataService over an AsyncSession.

    Writes outside ``transaction()`` commit immediately. Inside it they
    commit together when the block exits, or roll back together on error.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self._depth = 0

    # -------------------------
    # helpers
    # -------------------------
    @staticmethod
    def _table(name: str):
        try:
            return TABLES[name]
        except KeyError:
            raise ValueError(f"Unknown table: {name}")

    @staticmethod
    def _column(table, name: str):
        try:
            return table.c[name]
        except KeyError:
            raise ValueError(f"Unknown column {table.name}.{name}")

    def _where(self, stmt, table, filters: Mapping[str, Any] | None):
        for name, value in (filters or {}).items():
            stmt = stmt.where(self._column(table, name) == value)
        return stmt

    async def _execute(self, stmt):
        try:
            return await self.db.execute(stmt)
        except IntegrityError as exc:
            await self._abort()
            logger.warning("Constraint violation", extra={"error": str(exc.orig)})
            raise ConflictError("Database constraint violation")
        except (SQLAlchemyError, OSError) as exc:
            await self._abort()
            logger.error("Data service call failed", exc_info=True)
            raise TransportError("Data service unavailable", details={"error": str(exc)})

    async def _abort(self):
        if self._depth == 0:
            await self.db.rollback()

    async def _commit(self):
        if self._depth:
            return
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Database constraint violation")
        except (SQLAlchemyError, OSError) as exc:
            await self.db.rollback()
            raise TransportError("Data service unavailable", details={"error": str(exc)})

    # -------------------------
    # contract
    # -------------------------
    async def select(self, table, filters=None, order_by=None) -> list[Row]:
        t = self._table(table)
        stmt = self._where(select(t), t, filters)

        for key in order_by or ():
            column = self._column(t, key.lstrip("-"))
            stmt = stmt.order_by(desc(column) if key.startswith("-") else asc(column))

        result = await self._execute(stmt)
        return [_to_row(m) for m in result.mappings().all()]

    async def insert(self, table, row) -> Row:
        t = self._table(table)
        result = await self._execute(insert(t).values(**_to_storage(row)).returning(*t.c))
        inserted = _to_row(result.mappings().one())
        await self._commit()
        return inserted

    async def update(self, table, filters, values) -> int:
        if not filters:
            raise ValueError("update() requires at least one filter")

        t = self._table(table)
        result = await self._execute(self._where(update(t), t, filters).values(**_to_storage(values)))
        await self._commit()
        return result.rowcount

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SqlAlchemyDataService"]:
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                await self.db.rollback()
            raise
        self._depth -= 1
        await self._commit()
