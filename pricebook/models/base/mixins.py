from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func


class TimestampMixin:
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )


class SoftDeleteMixin:
    is_deleted = Column(Boolean, default=False, nullable=False)


class StampMixin:
    """Audit stamp: who last mutated the row and when."""

    @declared_attr
    def modified_by(cls):
        return Column(
            String(36),
            ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        )

    modified_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
