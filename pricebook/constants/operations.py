# pricebook/constants/operations.py

from enum import Enum


class OperationKind(str, Enum):
    ADD = "ADD"
    EDIT = "EDIT"
    DELETE = "DELETE"
    RECOVER = "RECOVER"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


PERMISSION_FLAGS = ("can_add", "can_edit", "can_delete", "is_blocked")
