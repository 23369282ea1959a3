# pricebook/schemas/products/product_schemas.py

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from decimal import Decimal
from datetime import datetime, timezone

from pricebook.constants.operations import OperationKind


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive values are taken as UTC; aware ones are converted to it."""
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ProductCreate(BaseModel):
    code: str
    description: str
    unit: str = "pc"
    price: Decimal = Field(default=Decimal("0.00"), ge=0)
    effectivity_date: Optional[datetime] = None

    @field_validator("code", "description")
    @classmethod
    def _required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("unit")
    @classmethod
    def _strip_unit(cls, value: str) -> str:
        return value.strip()

    @field_validator("effectivity_date")
    @classmethod
    def _effectivity_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class ProductUpdate(BaseModel):
    description: Optional[str] = None
    unit: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    effectivity_date: Optional[datetime] = None

    class Config:
        extra = "forbid"

    @field_validator("description")
    @classmethod
    def _description_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("unit")
    @classmethod
    def _strip_unit(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else value

    @field_validator("effectivity_date")
    @classmethod
    def _effectivity_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @model_validator(mode="after")
    def _effectivity_needs_price(self):
        if self.effectivity_date is not None and self.price is None:
            raise ValueError("effectivity_date requires price")
        return self


class ProductOut(BaseModel):
    code: str
    description: str
    unit: str
    is_deleted: bool
    last_operation: OperationKind
    modified_by: Optional[str]
    modified_at: datetime

    # latest non-deleted price_history row
    current_price: Decimal = Decimal("0.00")

    class Config:
        from_attributes = True


class ProductStats(BaseModel):
    total: int
    active: int
    archived: int


class ProductListData(BaseModel):
    total: int
    items: List[ProductOut]
    stats: ProductStats
