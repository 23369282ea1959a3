from fastapi import Depends

from pricebook.services.users.permission_service import ensure_capability, ensure_admin
from pricebook.utils.get_user import get_current_user, CurrentUser


def require_capability(capability: str):
    async def capability_checker(user: CurrentUser = Depends(get_current_user)):
        ensure_capability(user.permissions, capability)
        return user
    return capability_checker


async def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    ensure_admin(user.permissions)
    return user
