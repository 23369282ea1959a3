# pricebook/utils/decimal_utils.py
from decimal import Decimal, ROUND_HALF_UP

TWOPLACES = Decimal("0.01")

def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    return f"${to_decimal(value):,.2f}"
