# pricebook/routers/products/product_router.py

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from pricebook.constants.error_codes import ErrorCode
from pricebook.core.exceptions import NotFoundError
from pricebook.schemas.products.product_schemas import (
    ProductCreate,
    ProductUpdate,
    ProductOut,
    ProductListData,
)
from pricebook.schemas.products.price_history_schemas import PriceHistoryOut
from pricebook.services.data.data_service import DataService
from pricebook.services.products.product_repository import ProductRepository
from pricebook.services.products.price_history_service import fetch_price_history
from pricebook.services.users.user_admin_service import load_profile_names
from pricebook.utils.check_permissions import require_capability
from pricebook.utils.get_user import get_current_user, get_data_service, CurrentUser
from pricebook.utils.pdf_generators.product_list_pdf import generate_product_list_pdf
from pricebook.utils.pdf_generators.price_history_pdf import generate_price_history_pdf
from pricebook.utils.response import APIResponse, ERROR_RESPONSES, success_response
from pricebook.utils.logger import get_logger

router = APIRouter(prefix="/products", tags=["Products"], responses=ERROR_RESPONSES)
logger = get_logger(__name__)


def get_repository(data: DataService = Depends(get_data_service)) -> ProductRepository:
    return ProductRepository(data)


def _pdf(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


async def _loaded_product(repo: ProductRepository, code: str) -> ProductOut:
    await repo.load()
    product = repo.get(code)
    if product is None:
        raise NotFoundError(f"Product {code} not found", ErrorCode.PRODUCT_NOT_FOUND)
    return product


# ---------------- LIST / REPORT ----------------
@router.get("/", response_model=APIResponse[ProductListData])
async def list_products_api(
    repo: ProductRepository = Depends(get_repository),
    user: CurrentUser = Depends(get_current_user),
    search: str = Query("", description="Substring of code or description"),
    show_archived: bool = Query(False),
):
    logger.info("List products", extra={"search": search, "show_archived": show_archived})
    await repo.load()
    items = repo.search(search, show_archived)
    return success_response(
        "Products fetched successfully",
        ProductListData(total=len(items), items=items, stats=repo.stats()),
    )


@router.get("/report.pdf")
async def product_list_report_api(
    repo: ProductRepository = Depends(get_repository),
    data: DataService = Depends(get_data_service),
    user: CurrentUser = Depends(get_current_user),
):
    products = await repo.load()
    content = generate_product_list_pdf(
        products,
        is_admin=user.permissions.is_admin,
        profile_names=await load_profile_names(data),
    )
    return _pdf(content, "product-list.pdf")


# ---------------- GET ----------------
@router.get("/{code}", response_model=APIResponse[ProductOut])
async def get_product_api(
    code: str,
    repo: ProductRepository = Depends(get_repository),
    user: CurrentUser = Depends(get_current_user),
):
    product = await _loaded_product(repo, code)
    return success_response("Product fetched successfully", product)


# ---------------- CREATE ----------------
@router.post("/", response_model=APIResponse[ProductOut])
async def create_product_api(
    payload: ProductCreate,
    repo: ProductRepository = Depends(get_repository),
    user: CurrentUser = Depends(require_capability("can_add")),
):
    logger.info("Create product", extra={"code": payload.code})
    product = await repo.add(payload, user.id)
    return success_response("Product created successfully", product)


# ---------------- UPDATE ----------------
@router.patch("/{code}", response_model=APIResponse[ProductOut])
async def update_product_api(
    code: str,
    payload: ProductUpdate,
    repo: ProductRepository = Depends(get_repository),
    user: CurrentUser = Depends(require_capability("can_edit")),
):
    product = await repo.update(code, payload, user.id)
    return success_response("Product updated successfully", product)


# ---------------- DELETE / RESTORE ----------------
@router.patch("/{code}/delete", response_model=APIResponse[ProductOut])
async def delete_product_api(
    code: str,
    repo: ProductRepository = Depends(get_repository),
    user: CurrentUser = Depends(require_capability("can_delete")),
):
    product = await repo.soft_delete(code, user.id)
    return success_response("Product archived successfully", product)


@router.patch("/{code}/restore", response_model=APIResponse[ProductOut])
async def restore_product_api(
    code: str,
    repo: ProductRepository = Depends(get_repository),
    user: CurrentUser = Depends(require_capability("can_delete")),
):
    product = await repo.restore(code, user.id)
    return success_response("Product restored successfully", product)


# ---------------- PRICE HISTORY ----------------
@router.get("/{code}/price-history", response_model=APIResponse[list[PriceHistoryOut]])
async def price_history_api(
    code: str,
    data: DataService = Depends(get_data_service),
    user: CurrentUser = Depends(get_current_user),
):
    history = await fetch_price_history(data, code)
    return success_response("Price history fetched successfully", history)


@router.get("/{code}/price-history/report.pdf")
async def price_history_report_api(
    code: str,
    repo: ProductRepository = Depends(get_repository),
    data: DataService = Depends(get_data_service),
    user: CurrentUser = Depends(get_current_user),
):
    product = await _loaded_product(repo, code)
    content = generate_price_history_pdf(
        product,
        await fetch_price_history(data, code),
        await load_profile_names(data),
    )
    return _pdf(content, f"price-history-{code}.pdf")
