import asyncio

from pricebook.constants.operations import Role
from pricebook.core.config import ADMIN_EMAIL, ADMIN_PASSWORD
from pricebook.core.db import AsyncSessionLocal, init_models
from pricebook.services.auth.session_service import SessionProvider
from pricebook.services.data.data_service import DataService, SqlAlchemyDataService
from pricebook.services.users.user_admin_service import set_role


async def create_admin(data: DataService, email: str, password: str, full_name: str = "Administrator"):
    profile = await SessionProvider(data).sign_up(email, password, full_name)
    await set_role(data, profile["id"], Role.ADMIN)
    return profile


async def main():
    if not ADMIN_PASSWORD:
        raise SystemExit("ADMIN_PASSWORD must be set")

    await init_models()
    async with AsyncSessionLocal() as session:
        profile = await create_admin(SqlAlchemyDataService(session), ADMIN_EMAIL, ADMIN_PASSWORD)
    print(f"Admin user created: {profile['email']}")


if __name__ == "__main__":
    asyncio.run(main())
