from sqlalchemy import (
    Column,
    Integer,
    String,
    Numeric,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    CheckConstraint,
)
from pricebook.core.db import Base
from pricebook.models.base.mixins import SoftDeleteMixin, StampMixin
from pricebook.constants.operations import OperationKind


class Product(Base, SoftDeleteMixin, StampMixin):
    __tablename__ = "products"

    code = Column(String(50), primary_key=True)
    description = Column(String(500), nullable=False)
    unit = Column(String(20), nullable=False, default="pc")
    last_operation = Column(
        Enum(OperationKind, native_enum=False, length=10),
        nullable=False,
        default=OperationKind.ADD,
    )

    def __repr__(self):
        return f"<Product code={self.code} deleted={self.is_deleted}>"


class PriceHistory(Base, SoftDeleteMixin, StampMixin):
    """Append-only. Rows are never updated in place or hard-deleted."""

    __tablename__ = "price_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_code = Column(
        String(50),
        ForeignKey("products.code", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    unit_price = Column(Numeric(12, 2), nullable=False)
    effectivity_date = Column(DateTime(timezone=True), nullable=False)
    operation_kind = Column(
        Enum(OperationKind, native_enum=False, length=10),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("unit_price >= 0", name="ck_price_history_unit_price_non_negative"),
        Index("ix_price_history_code_effective", "product_code", "effectivity_date"),
    )

    def __repr__(self):
        return f"<PriceHistory id={self.id} code={self.product_code} price={self.unit_price}>"
