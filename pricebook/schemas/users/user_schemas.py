from pydantic import BaseModel, EmailStr, Field
from typing import Literal, List

from pricebook.constants.operations import Role
from pricebook.core.config import MIN_PASSWORD_LENGTH


# =========================
# PERMISSIONS
# =========================
class EffectivePermissions(BaseModel):
    role: Role = Role.USER
    can_add: bool = False
    can_edit: bool = False
    can_delete: bool = False
    is_blocked: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# =========================
# CREATE / UPDATE
# =========================
class UserCreateSchema(BaseModel):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    full_name: str = ""


class PermissionUpdateSchema(BaseModel):
    field: Literal["can_add", "can_edit", "can_delete", "is_blocked"]
    value: bool


class RoleUpdateSchema(BaseModel):
    role: Role


# =========================
# RESPONSE SCHEMAS
# =========================
class UserRowSchema(BaseModel):
    id: str
    email: str
    full_name: str
    role: Role
    can_add: bool
    can_edit: bool
    can_delete: bool
    is_blocked: bool


class UserListData(BaseModel):
    total: int
    items: List[UserRowSchema]
