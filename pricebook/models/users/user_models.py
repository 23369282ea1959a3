from sqlalchemy import Column, String, Boolean, Enum, ForeignKey
from pricebook.core.db import Base
from pricebook.models.base.mixins import TimestampMixin
from pricebook.constants.operations import Role


class Profile(Base, TimestampMixin):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    full_name = Column(String(150), nullable=False, default="")
    email = Column(String(150), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)

    def __repr__(self):
        return f"<Profile id={self.id} email={self.email}>"


class UserRole(Base):
    __tablename__ = "user_roles"

    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    role = Column(
        Enum(Role, native_enum=False, length=10, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.USER,
    )

    def __repr__(self):
        return f"<UserRole user_id={self.user_id} role={self.role}>"


class UserPermission(Base):
    __tablename__ = "user_permissions"

    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    can_add = Column(Boolean, nullable=False, default=False)
    can_edit = Column(Boolean, nullable=False, default=False)
    can_delete = Column(Boolean, nullable=False, default=False)
    is_blocked = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<UserPermission user_id={self.user_id} blocked={self.is_blocked}>"
