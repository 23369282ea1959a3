# pricebook/services/users/permission_service.py

from typing import Mapping, Optional, Any

from pricebook.constants.operations import Role, PERMISSION_FLAGS
from pricebook.core.exceptions import AuthorizationError, BlockedAccountError
from pricebook.schemas.users.user_schemas import EffectivePermissions
from pricebook.services.data.data_service import DataService
from pricebook.utils.logger import get_logger

logger = get_logger(__name__)

CAPABILITY_LABELS = {
    "can_add": "add products",
    "can_edit": "edit products",
    "can_delete": "delete or restore products",
}


def derive_permissions(
    role: Optional[str],
    permission_row: Optional[Mapping[str, Any]],
) -> EffectivePermissions:
    role = Role(role) if role else Role.USER

    # admin overrides the stored flags, it does not merge with them
    if role == Role.ADMIN:
        return EffectivePermissions(
            role=role,
            can_add=True,
            can_edit=True,
            can_delete=True,
            is_blocked=False,
        )

    row = permission_row or {}
    return EffectivePermissions(
        role=role,
        **{flag: bool(row.get(flag, False)) for flag in PERMISSION_FLAGS},
    )


async def resolve_permissions(data: DataService, user_id: str) -> EffectivePermissions:
    roles = await data.select("user_roles", {"user_id": user_id})
    perms = await data.select("user_permissions", {"user_id": user_id})

    permissions = derive_permissions(
        roles[0]["role"] if roles else None,
        perms[0] if perms else None,
    )

    logger.debug(
        "Permissions resolved",
        extra={"user_id": user_id, **permissions.model_dump(mode="json")},
    )
    return permissions


def ensure_capability(permissions: EffectivePermissions, capability: str):
    if capability not in CAPABILITY_LABELS:
        raise ValueError(f"Unknown capability: {capability}")

    if permissions.is_blocked:
        raise BlockedAccountError("Your account has been blocked. Contact an administrator.")

    if not getattr(permissions, capability):
        raise AuthorizationError(
            f"You do not have permission to {CAPABILITY_LABELS[capability]}",
            details={"capability": capability},
        )


def ensure_admin(permissions: EffectivePermissions):
    if not permissions.is_admin:
        raise AuthorizationError("Admin access required")
