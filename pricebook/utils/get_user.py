from typing import AsyncGenerator

from fastapi import Depends, Header, Request

from pricebook.core.db import AsyncSessionLocal
from pricebook.core.exceptions import AuthenticationError
from pricebook.schemas.users.user_schemas import EffectivePermissions
from pricebook.services.auth.session_service import SessionProvider, Session
from pricebook.services.data.data_service import DataService, SqlAlchemyDataService
from pricebook.services.workspace import guard_session
from pricebook.utils.logger import get_logger

logger = get_logger("auth.guard")


async def get_data_service() -> AsyncGenerator[DataService, None]:
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyDataService(session)


def get_session_provider(data: DataService = Depends(get_data_service)) -> SessionProvider:
    return SessionProvider(data)


class CurrentUser:
    def __init__(self, session: Session, permissions: EffectivePermissions):
        self.session = session
        self.permissions = permissions

    @property
    def id(self) -> str:
        return self.session.user_id


async def get_current_user(
    request: Request,
    authorization: str = Header(default=""),
    data: DataService = Depends(get_data_service),
    sessions: SessionProvider = Depends(get_session_provider),
) -> CurrentUser:
    if not authorization.startswith("Bearer "):
        logger.warning("Missing bearer token")
        raise AuthenticationError("Invalid authorization header")

    token = authorization.split("Bearer ", 1)[1].strip()
    session = await sessions.resume_session(token)

    # resolved on every request so a block takes effect immediately
    permissions = await guard_session(data, sessions, session)

    user = CurrentUser(session, permissions)
    request.state.user = user
    return user
