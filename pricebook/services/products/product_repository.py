# pricebook/services/products/product_repository.py

from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional

from pricebook.constants.error_codes import ErrorCode
from pricebook.constants.operations import OperationKind
from pricebook.core.exceptions import ConflictError, NotFoundError
from pricebook.schemas.products.product_schemas import (
    ProductCreate,
    ProductUpdate,
    ProductOut,
    ProductStats,
)
from pricebook.services.data.data_service import DataService, Row
from pricebook.utils.decimal_utils import to_decimal
from pricebook.utils.validation import validate_payload
from pricebook.utils.logger import get_logger

logger = get_logger(__name__)

# newest first; append order breaks exact ties
PRICE_ORDER = ("-effectivity_date", "-modified_at", "-id")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_current_prices(
    product_rows: Iterable[Row],
    price_rows: Iterable[Row],
) -> list[ProductOut]:
    """Attach the first price seen per code; ``price_rows`` must be newest first."""
    latest: dict[str, Any] = {}
    for row in price_rows:
        if row.get("is_deleted"):
            continue
        latest.setdefault(row["product_code"], row["unit_price"])

    return [
        ProductOut.model_validate(
            {**row, "current_price": to_decimal(latest.get(row["code"], 0))}
        )
        for row in product_rows
    ]


def filter_products(
    products: Iterable[ProductOut],
    query: str = "",
    show_archived: bool = False,
) -> list[ProductOut]:
    needle = (query or "").lower()
    return [
        p
        for p in products
        if (show_archived or not p.is_deleted)
        and (
            not needle
            or needle in p.code.lower()
            or needle in p.description.lower()
        )
    ]


class ProductRepository:
    """In-memory product list backed by a DataService.

    Every mutation is followed by a full ``load()``; nothing is patched locally.
    """

    def __init__(self, data: DataService, clock: Callable[[], datetime] = utcnow):
        self.data = data
        self.clock = clock
        self.products: list[ProductOut] = []

    # ---------------- READ ----------------
    async def load(self) -> list[ProductOut]:
        product_rows = await self.data.select("products", order_by=["code"])
        price_rows = await self.data.select(
            "price_history",
            {"is_deleted": False},
            order_by=PRICE_ORDER,
        )
        self.products = resolve_current_prices(product_rows, price_rows)
        logger.debug("Products loaded", extra={"count": len(self.products)})
        return self.products

    def search(self, query: str = "", show_archived: bool = False) -> list[ProductOut]:
        return filter_products(self.products, query, show_archived)

    def get(self, code: str) -> Optional[ProductOut]:
        return next((p for p in self.products if p.code == code), None)

    def stats(self) -> ProductStats:
        archived = sum(1 for p in self.products if p.is_deleted)
        return ProductStats(
            total=len(self.products),
            active=len(self.products) - archived,
            archived=archived,
        )

    def clear(self):
        self.products = []

    # ---------------- CREATE ----------------
    async def add(
        self,
        payload: ProductCreate | Mapping[str, Any],
        actor_id: Optional[str],
    ) -> ProductOut:
        payload = validate_payload(ProductCreate, payload, "Invalid product data")
        now = self.clock()

        async with self.data.transaction():
            try:
                await self.data.insert(
                    "products",
                    {
                        "code": payload.code,
                        "description": payload.description,
                        "unit": payload.unit,
                        "is_deleted": False,
                        "last_operation": OperationKind.ADD,
                        "modified_by": actor_id,
                        "modified_at": now,
                    },
                )
            except ConflictError:
                raise ConflictError(
                    f"Product code {payload.code} already exists",
                    ErrorCode.PRODUCT_CODE_EXISTS,
                )

            await self._append_price(
                payload.code,
                payload.price,
                payload.effectivity_date or now,
                OperationKind.ADD,
                actor_id,
                now,
            )

        logger.info(
            "Product added",
            extra={"code": payload.code, "price": str(payload.price), "actor": actor_id},
        )
        return await self._reload(payload.code)

    # ---------------- UPDATE ----------------
    async def update(
        self,
        code: str,
        changes: ProductUpdate | Mapping[str, Any],
        actor_id: Optional[str],
    ) -> ProductOut:
        changes = validate_payload(ProductUpdate, changes, "Invalid product changes")
        values = changes.model_dump(
            exclude_none=True,
            exclude={"price", "effectivity_date"},
        )
        now = self.clock()

        async with self.data.transaction():
            await self._stamp(code, values, OperationKind.EDIT, actor_id, now)

            if changes.price is not None:
                await self._append_price(
                    code,
                    changes.price,
                    changes.effectivity_date or now,
                    OperationKind.EDIT,
                    actor_id,
                    now,
                )

        logger.info(
            "Product updated",
            extra={
                "code": code,
                "fields": sorted(changes.model_dump(exclude_none=True)),
                "actor": actor_id,
            },
        )
        return await self._reload(code)

    # ---------------- DELETE / RESTORE ----------------
    async def soft_delete(self, code: str, actor_id: Optional[str]) -> ProductOut:
        # an already deleted product is re-stamped
        await self._stamp(code, {"is_deleted": True}, OperationKind.DELETE, actor_id, self.clock())
        logger.info("Product archived", extra={"code": code, "actor": actor_id})
        return await self._reload(code)

    async def restore(self, code: str, actor_id: Optional[str]) -> ProductOut:
        await self._stamp(code, {"is_deleted": False}, OperationKind.RECOVER, actor_id, self.clock())
        logger.info("Product restored", extra={"code": code, "actor": actor_id})
        return await self._reload(code)

    # ---------------- INTERNALS ----------------
    async def _stamp(
        self,
        code: str,
        values: dict,
        operation: OperationKind,
        actor_id: Optional[str],
        now: datetime,
    ):
        affected = await self.data.update(
            "products",
            {"code": code},
            {
                **values,
                "last_operation": operation,
                "modified_by": actor_id,
                "modified_at": now,
            },
        )
        if not affected:
            raise NotFoundError(
                f"Product {code} not found",
                ErrorCode.PRODUCT_NOT_FOUND,
            )

    async def _append_price(
        self,
        code: str,
        price,
        effectivity_date: datetime,
        operation: OperationKind,
        actor_id: Optional[str],
        now: datetime,
    ) -> Row:
        return await self.data.insert(
            "price_history",
            {
                "product_code": code,
                "unit_price": to_decimal(price),
                "effectivity_date": effectivity_date,
                "operation_kind": operation,
                "modified_by": actor_id,
                "modified_at": now,
                "is_deleted": False,
            },
        )

    async def _reload(self, code: str) -> ProductOut:
        await self.load()
        product = self.get(code)
        if product is None:
            raise NotFoundError(
                f"Product {code} not found",
                ErrorCode.PRODUCT_NOT_FOUND,
            )
        return product
