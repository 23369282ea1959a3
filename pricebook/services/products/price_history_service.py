# pricebook/services/products/price_history_service.py

from pricebook.schemas.products.price_history_schemas import PriceHistoryOut
from pricebook.services.data.data_service import DataService
from pricebook.services.products.product_repository import PRICE_ORDER
from pricebook.utils.logger import get_logger

logger = get_logger(__name__)


async def fetch_price_history(data: DataService, code: str) -> list[PriceHistoryOut]:
    """Full history for one product, newest first, soft-deleted rows included."""
    rows = await data.select(
        "price_history",
        {"product_code": code},
        order_by=PRICE_ORDER,
    )

    logger.info("Price history fetched", extra={"code": code, "count": len(rows)})

    return [PriceHistoryOut.model_validate(r) for r in rows]
