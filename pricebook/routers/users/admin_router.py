from fastapi import APIRouter, Depends

from pricebook.schemas.users.user_schemas import (
    UserCreateSchema,
    PermissionUpdateSchema,
    RoleUpdateSchema,
    UserRowSchema,
    UserListData,
)
from pricebook.services.auth.session_service import SessionProvider
from pricebook.services.data.data_service import DataService
from pricebook.services.users.user_admin_service import (
    list_users,
    create_user,
    update_permission,
    set_role,
    toggle_role,
)
from pricebook.utils.check_permissions import require_admin
from pricebook.utils.get_user import get_data_service, get_session_provider, CurrentUser
from pricebook.utils.response import APIResponse, ERROR_RESPONSES, success_response
from pricebook.utils.logger import get_logger

router = APIRouter(prefix="/users", tags=["Users"], responses=ERROR_RESPONSES)
logger = get_logger(__name__)


@router.get("/", response_model=APIResponse[UserListData])
async def list_users_api(
    data: DataService = Depends(get_data_service),
    admin: CurrentUser = Depends(require_admin),
):
    logger.info("List users request")
    users = await list_users(data)
    return success_response("Users fetched", users)


@router.post("/")
async def create_user_api(
    payload: UserCreateSchema,
    sessions: SessionProvider = Depends(get_session_provider),
    admin: CurrentUser = Depends(require_admin),
):
    logger.info("Create user request", extra={"email": payload.email})
    profile = await create_user(
        sessions,
        payload.email,
        payload.password,
        payload.full_name,
        admin_id=admin.id,
    )
    return success_response("User created successfully", profile)


@router.patch("/{user_id}/permissions", response_model=APIResponse[UserRowSchema])
async def update_permission_api(
    user_id: str,
    payload: PermissionUpdateSchema,
    data: DataService = Depends(get_data_service),
    admin: CurrentUser = Depends(require_admin),
):
    user = await update_permission(data, user_id, payload.field, payload.value, admin_id=admin.id)
    return success_response("Permission updated", user)


@router.patch("/{user_id}/role", response_model=APIResponse[UserRowSchema])
async def set_role_api(
    user_id: str,
    payload: RoleUpdateSchema,
    data: DataService = Depends(get_data_service),
    admin: CurrentUser = Depends(require_admin),
):
    user = await set_role(data, user_id, payload.role, admin_id=admin.id)
    return success_response("Role updated", user)


@router.post("/{user_id}/role/toggle", response_model=APIResponse[UserRowSchema])
async def toggle_role_api(
    user_id: str,
    data: DataService = Depends(get_data_service),
    admin: CurrentUser = Depends(require_admin),
):
    user = await toggle_role(data, user_id, admin_id=admin.id)
    return success_response("Role updated", user)
