import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from main import app
from pricebook.core.db import init_models
from pricebook.core.security import hash_password
from pricebook.scripts.create_admin import create_admin
from pricebook.services.data.data_service import SqlAlchemyDataService
from pricebook.utils.get_user import get_data_service
from tests.fakes import make_engine, make_user

PASSWORD = "secret-pass"


@pytest.fixture
def client(tmp_path):
    engine = make_engine(tmp_path / "api.db")
    factory = async_sessionmaker(engine, expire_on_commit=False)

    async def seed():
        await init_models(engine)
        async with factory() as session:
            data = SqlAlchemyDataService(session)
            await create_admin(data, "admin@example.com", PASSWORD)
            await make_user(data, "editor", password_hash=hash_password(PASSWORD), can_edit=True)
            await make_user(data, "viewer", password_hash=hash_password(PASSWORD))
            await make_user(data, "blocked", password_hash=hash_password(PASSWORD), is_blocked=True)

    asyncio.run(seed())

    async def override_data_service():
        async with factory() as session:
            yield SqlAlchemyDataService(session)

    app.dependency_overrides[get_data_service] = override_data_service
    yield TestClient(app)
    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())


def login(client, email):
    res = client.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['data']['access_token']}"}


@pytest.fixture
def admin(client):
    return login(client, "admin@example.com")


def create_product(client, headers, code="P-1", price="10"):
    res = client.post(
        "/products/",
        json={"code": code, "description": "Paint", "unit": "can", "price": price},
        headers=headers,
    )
    assert res.status_code == 200, res.text
    return res.json()["data"]


class TestAuth:
    def test_health(self, client):
        assert client.get("/").json()["status"] == "ok"

    def test_bad_password(self, client):
        res = client.post("/auth/login", json={"email": "admin@example.com", "password": "wrong-one"})
        assert res.status_code == 401
        assert res.json()["error_code"] == "UNAUTHORIZED"

    def test_blocked_login_is_refused(self, client):
        res = client.post("/auth/login", json={"email": "blocked@example.com", "password": PASSWORD})
        assert res.status_code == 403
        assert res.json()["error_code"] == "ACCOUNT_BLOCKED"

    def test_me(self, client, admin):
        body = client.get("/auth/me", headers=admin).json()["data"]
        assert body["email"] == "admin@example.com"
        assert body["permissions"]["role"] == "admin"
        assert body["permissions"]["can_delete"] is True

    def test_missing_token(self, client):
        assert client.get("/products/").status_code == 401

    def test_signup_then_login(self, client):
        res = client.post(
            "/auth/signup",
            json={"email": "new@example.com", "password": PASSWORD, "full_name": "New"},
        )
        assert res.status_code == 200
        assert "password_hash" not in res.json()["data"]

        me = client.get("/auth/me", headers=login(client, "new@example.com")).json()["data"]
        assert me["permissions"]["can_add"] is False


class TestProducts:
    def test_create_update_and_history(self, client, admin):
        create_product(client, admin)

        res = client.patch("/products/P-1", json={"price": "12.75"}, headers=admin)
        assert res.status_code == 200
        assert res.json()["data"]["current_price"] == "12.75"
        assert res.json()["data"]["last_operation"] == "EDIT"

        history = client.get("/products/P-1/price-history", headers=admin).json()["data"]
        assert [h["unit_price"] for h in history] == ["12.75", "10.00"]

    def test_duplicate_code(self, client, admin):
        create_product(client, admin)
        res = client.post(
            "/products/",
            json={"code": "P-1", "description": "Again", "price": "1"},
            headers=admin,
        )
        assert res.status_code == 409
        assert res.json()["error_code"] == "PRODUCT_CODE_EXISTS"

    def test_code_cannot_be_changed(self, client, admin):
        create_product(client, admin)
        res = client.patch("/products/P-1", json={"code": "P-2"}, headers=admin)
        assert res.status_code == 422

    def test_list_hides_archived_by_default(self, client, admin):
        create_product(client, admin, "P-1")
        create_product(client, admin, "P-2")
        assert client.patch("/products/P-2/delete", headers=admin).status_code == 200

        body = client.get("/products/", headers=admin).json()["data"]
        assert [p["code"] for p in body["items"]] == ["P-1"]
        assert body["stats"] == {"total": 2, "active": 1, "archived": 1}

        body = client.get("/products/?show_archived=true&search=p-2", headers=admin).json()["data"]
        assert [p["code"] for p in body["items"]] == ["P-2"]

    def test_unknown_product(self, client, admin):
        res = client.get("/products/NOPE", headers=admin)
        assert res.status_code == 404
        assert res.json()["error_code"] == "PRODUCT_NOT_FOUND"


class TestCapabilities:
    def test_editor_cannot_add(self, client):
        headers = login(client, "editor@example.com")
        res = client.post("/products/", json={"code": "X", "description": "X"}, headers=headers)

        assert res.status_code == 403
        assert res.json()["details"] == {"capability": "can_add"}

    def test_editor_can_edit_but_not_restore(self, client, admin):
        create_product(client, admin)
        client.patch("/products/P-1/delete", headers=admin)
        headers = login(client, "editor@example.com")

        assert client.patch("/products/P-1", json={"unit": "tin"}, headers=headers).status_code == 200
        assert client.patch("/products/P-1/restore", headers=headers).status_code == 403

    def test_block_takes_effect_on_next_request(self, client, admin):
        headers = login(client, "viewer@example.com")
        assert client.get("/products/", headers=headers).status_code == 200

        client.patch(
            "/users/viewer/permissions",
            json={"field": "is_blocked", "value": True},
            headers=admin,
        )
        res = client.get("/products/", headers=headers)
        assert res.status_code == 403
        assert res.json()["error_code"] == "ACCOUNT_BLOCKED"


class TestUsersAdmin:
    def test_non_admin_refused(self, client):
        res = client.get("/users/", headers=login(client, "viewer@example.com"))
        assert res.status_code == 403

    def test_list_and_toggle_role(self, client, admin):
        users = client.get("/users/", headers=admin).json()["data"]
        assert users["total"] == 4

        res = client.post("/users/editor/role/toggle", headers=admin)
        assert res.json()["data"]["role"] == "admin"

    def test_grant_capability(self, client, admin):
        res = client.patch(
            "/users/viewer/permissions",
            json={"field": "can_add", "value": True},
            headers=admin,
        )
        assert res.status_code == 200
        assert res.json()["data"]["can_add"] is True

        create_product(client, login(client, "viewer@example.com"), "V-1")

    def test_create_user(self, client, admin):
        res = client.post(
            "/users/",
            json={"email": "staff@example.com", "password": PASSWORD, "full_name": "Staff"},
            headers=admin,
        )
        assert res.status_code == 200
        assert res.json()["data"]["email"] == "staff@example.com"


class TestReports:
    def test_product_list_pdf(self, client, admin):
        create_product(client, admin)
        res = client.get("/products/report.pdf", headers=admin)

        assert res.status_code == 200
        assert res.headers["content-type"] == "application/pdf"
        assert res.content.startswith(b"%PDF")

    def test_price_history_pdf(self, client, admin):
        create_product(client, admin)
        res = client.get("/products/P-1/price-history/report.pdf", headers=admin)
        assert res.content.startswith(b"%PDF")
