import pytest

from pricebook.constants.operations import Role
from pricebook.core.exceptions import AuthorizationError, BlockedAccountError
from pricebook.schemas.users.user_schemas import EffectivePermissions
from pricebook.services.users.permission_service import (
    derive_permissions,
    resolve_permissions,
    ensure_capability,
    ensure_admin,
)
from tests.fakes import make_user


BLOCKED_NO_FLAGS = {"can_add": False, "can_edit": False, "can_delete": False, "is_blocked": True}


class TestDerivePermissions:
    def test_admin_overrides_stored_flags(self):
        permissions = derive_permissions("admin", BLOCKED_NO_FLAGS)
        assert permissions == EffectivePermissions(
            role=Role.ADMIN, can_add=True, can_edit=True, can_delete=True, is_blocked=False
        )

    def test_user_flags_apply_verbatim(self):
        permissions = derive_permissions(
            Role.USER,
            {"can_add": False, "can_edit": True, "can_delete": False, "is_blocked": False},
        )
        assert (permissions.can_add, permissions.can_edit, permissions.can_delete) == (False, True, False)
        assert permissions.is_admin is False

    def test_missing_rows_default_to_user_without_capabilities(self):
        permissions = derive_permissions(None, None)
        assert permissions == EffectivePermissions()
        assert permissions.role == Role.USER


class TestResolvePermissions:
    async def test_admin_from_store(self, data):
        await make_user(data, "boss", role=Role.ADMIN, is_blocked=True)
        permissions = await resolve_permissions(data, "boss")
        assert permissions.is_admin
        assert permissions.can_add and permissions.can_edit and permissions.can_delete
        assert permissions.is_blocked is False

    async def test_unknown_user(self, data):
        assert await resolve_permissions(data, "ghost") == EffectivePermissions()

    async def test_blocked_user(self, fake_data):
        await make_user(fake_data, "b1", can_add=True, is_blocked=True)
        permissions = await resolve_permissions(fake_data, "b1")
        assert permissions.is_blocked is True
        assert permissions.can_add is True


class TestEnsureCapability:
    def test_missing_capability(self):
        with pytest.raises(AuthorizationError) as exc_info:
            ensure_capability(EffectivePermissions(can_edit=True), "can_add")
        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {"capability": "can_add"}

    def test_granted_capability(self):
        ensure_capability(EffectivePermissions(can_edit=True), "can_edit")

    def test_blocked_overrides_capability(self):
        with pytest.raises(BlockedAccountError):
            ensure_capability(EffectivePermissions(can_add=True, is_blocked=True), "can_add")

    def test_unknown_capability(self):
        with pytest.raises(ValueError):
            ensure_capability(EffectivePermissions(), "can_fly")

    def test_admin_required(self):
        with pytest.raises(AuthorizationError):
            ensure_admin(EffectivePermissions(can_add=True, can_edit=True, can_delete=True))
        ensure_admin(derive_permissions("admin", None))
