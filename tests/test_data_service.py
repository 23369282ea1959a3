from decimal import Decimal

import pytest

from pricebook.constants.operations import OperationKind
from pricebook.core.exceptions import ConflictError, TransportError
from pricebook.services.products.product_repository import ProductRepository


def product_row(code):
    return {
        "code": code,
        "description": f"{code} item",
        "unit": "pc",
        "is_deleted": False,
        "last_operation": OperationKind.ADD,
    }


class TestSqlAlchemyDataService:
    async def test_insert_returns_stored_row(self, data):
        row = await data.insert("products", product_row("A1"))

        assert row["code"] == "A1"
        assert row["modified_at"].tzinfo is not None
        assert row["last_operation"] == OperationKind.ADD

    async def test_select_orders_descending(self, data):
        for code in ("B", "A", "C"):
            await data.insert("products", product_row(code))

        rows = await data.select("products", order_by=["-code"])
        assert [r["code"] for r in rows] == ["C", "B", "A"]

    async def test_update_returns_affected_count(self, data):
        await data.insert("products", product_row("A1"))

        assert await data.update("products", {"code": "A1"}, {"unit": "box"}) == 1
        assert await data.update("products", {"code": "ZZ"}, {"unit": "box"}) == 0

    async def test_update_without_filters_is_refused(self, data):
        with pytest.raises(ValueError):
            await data.update("products", {}, {"unit": "box"})

    async def test_unknown_table(self, data):
        with pytest.raises(ValueError):
            await data.select("invoices")

    async def test_unique_violation_is_conflict(self, data):
        await data.insert("products", product_row("A1"))
        with pytest.raises(ConflictError):
            await data.insert("products", product_row("A1"))

        # the session is still usable afterwards
        assert len(await data.select("products")) == 1

    async def test_negative_price_violates_check(self, data):
        await data.insert("products", product_row("A1"))
        with pytest.raises(ConflictError):
            await data.insert(
                "price_history",
                {
                    "product_code": "A1",
                    "unit_price": Decimal("-1"),
                    "effectivity_date": (await data.select("products"))[0]["modified_at"],
                    "operation_kind": OperationKind.ADD,
                },
            )

    async def test_transaction_rolls_back_together(self, data):
        with pytest.raises(RuntimeError):
            async with data.transaction():
                await data.insert("products", product_row("A1"))
                raise RuntimeError("boom")

        assert await data.select("products") == []

    async def test_nested_transaction_commits_once(self, data):
        async with data.transaction():
            await data.insert("products", product_row("A1"))
            async with data.transaction():
                await data.insert("products", product_row("B1"))

        assert [r["code"] for r in await data.select("products", order_by=["code"])] == ["A1", "B1"]


class TestFailureInjection:
    async def test_failed_price_insert_leaves_no_product(self, fake_data, clock):
        repo = ProductRepository(fake_data, clock)
        fake_data.fail_on.add(("insert", "price_history"))

        with pytest.raises(TransportError):
            await repo.add({"code": "A1", "description": "Widget", "price": 5}, "u1")

        assert fake_data.tables["products"] == []
        assert fake_data.tables["price_history"] == []

    async def test_failed_update_price_keeps_previous_state(self, fake_data, clock):
        repo = ProductRepository(fake_data, clock)
        await repo.add({"code": "A1", "description": "Widget", "price": 5}, "u1")
        fake_data.fail_on.add(("insert", "price_history"))

        with pytest.raises(TransportError):
            await repo.update("A1", {"description": "Gadget", "price": 7}, "u2")

        (row,) = fake_data.tables["products"]
        assert row["description"] == "Widget"
        assert row["modified_by"] == "u1"
        assert len(fake_data.tables["price_history"]) == 1

    async def test_transport_error_is_not_retried(self, fake_data, clock):
        repo = ProductRepository(fake_data, clock)
        fake_data.fail_on.add(("select", "products"))

        with pytest.raises(TransportError):
            await repo.load()

        assert fake_data.calls.count(("select", "products")) == 1

    async def test_failed_reload_after_write_keeps_write(self, fake_data, clock):
        repo = ProductRepository(fake_data, clock)
        await repo.add({"code": "A1", "description": "Widget", "price": 5}, "u1")
        fake_data.fail_on.add(("select", "products"))

        with pytest.raises(TransportError):
            await repo.soft_delete("A1", "u1")

        assert fake_data.tables["products"][0]["is_deleted"] is True
