from pydantic import BaseModel
from typing import Optional
from decimal import Decimal
from datetime import datetime

from pricebook.constants.operations import OperationKind


class PriceHistoryOut(BaseModel):
    id: int
    product_code: str
    unit_price: Decimal
    effectivity_date: datetime
    operation_kind: OperationKind
    modified_by: Optional[str]
    modified_at: datetime
    is_deleted: bool

    class Config:
        from_attributes = True
