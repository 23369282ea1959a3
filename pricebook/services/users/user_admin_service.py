# pricebook/services/users/user_admin_service.py

from typing import Optional

from pricebook.constants.error_codes import ErrorCode
from pricebook.constants.operations import Role, PERMISSION_FLAGS
from pricebook.core.exceptions import NotFoundError, ValidationError
from pricebook.schemas.users.user_schemas import UserRowSchema, UserListData
from pricebook.services.auth.session_service import SessionProvider
from pricebook.services.data.data_service import DataService
from pricebook.utils.logger import get_logger

logger = get_logger(__name__)


# =========================
# PROFILES
# =========================
async def load_profile_names(data: DataService) -> dict[str, str]:
    profiles = await data.select("profiles")
    return {
        p["id"]: p["full_name"] or p["email"].split("@")[0]
        for p in profiles
    }


def display_name(names: dict[str, str], user_id: Optional[str]) -> str:
    if not user_id:
        return "—"
    return names.get(user_id) or user_id[:8]


# =========================
# LIST USERS
# =========================
async def list_users(data: DataService) -> UserListData:
    profiles = await data.select("profiles", order_by=["email"])
    roles = {r["user_id"]: r["role"] for r in await data.select("user_roles")}
    perms = {p["user_id"]: p for p in await data.select("user_permissions")}

    items = []
    for p in profiles:
        flags = perms.get(p["id"], {})
        items.append(
            UserRowSchema(
                id=p["id"],
                email=p["email"],
                full_name=p["full_name"] or "",
                role=roles.get(p["id"], Role.USER),
                **{flag: bool(flags.get(flag, False)) for flag in PERMISSION_FLAGS},
            )
        )

    return UserListData(total=len(items), items=items)


# =========================
# CREATE USER
# =========================
async def create_user(
    sessions: SessionProvider,
    email: str,
    password: str,
    full_name: str = "",
    admin_id: Optional[str] = None,
):
    profile = await sessions.sign_up(email, password, full_name)
    logger.info("User created", extra={"user_id": profile["id"], "actor": admin_id})
    return profile


# =========================
# PERMISSIONS
# =========================
async def update_permission(
    data: DataService,
    user_id: str,
    field: str,
    value: bool,
    admin_id: Optional[str] = None,
) -> UserRowSchema:
    if field not in PERMISSION_FLAGS:
        raise ValidationError(
            f"Unknown permission flag: {field}",
            details={"allowed": list(PERMISSION_FLAGS)},
        )

    affected = await data.update("user_permissions", {"user_id": user_id}, {field: bool(value)})
    if not affected:
        raise NotFoundError("User permissions not found", ErrorCode.USER_NOT_FOUND)

    logger.info(
        "Permission updated",
        extra={"target_user_id": user_id, "field": field, "value": bool(value), "actor": admin_id},
    )
    return await _get_user(data, user_id)


# =========================
# ROLES
# =========================
async def set_role(
    data: DataService,
    user_id: str,
    role: str,
    admin_id: Optional[str] = None,
) -> UserRowSchema:
    try:
        role = Role(role)
    except ValueError:
        raise ValidationError("Invalid role", ErrorCode.USER_ROLE_INVALID)

    affected = await data.update("user_roles", {"user_id": user_id}, {"role": role})
    if not affected:
        raise NotFoundError("User role not found", ErrorCode.USER_NOT_FOUND)

    logger.info(
        "Role updated",
        extra={"target_user_id": user_id, "new_role": role.value, "actor": admin_id},
    )
    return await _get_user(data, user_id)


async def toggle_role(
    data: DataService,
    user_id: str,
    admin_id: Optional[str] = None,
) -> UserRowSchema:
    current = await _get_user(data, user_id)
    new_role = Role.USER if current.role == Role.ADMIN else Role.ADMIN
    return await set_role(data, user_id, new_role, admin_id)


async def _get_user(data: DataService, user_id: str) -> UserRowSchema:
    users = await list_users(data)
    for user in users.items:
        if user.id == user_id:
            return user
    raise NotFoundError("User not found", ErrorCode.USER_NOT_FOUND)
