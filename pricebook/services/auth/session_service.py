# pricebook/services/auth/session_service.py

import uuid
from enum import Enum
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel

from pricebook.constants.error_codes import ErrorCode
from pricebook.constants.operations import Role
from pricebook.core.config import MIN_PASSWORD_LENGTH
from pricebook.core.exceptions import AuthenticationError, ConflictError, ValidationError
from pricebook.core.security import hash_password, verify_password, create_access_token, decode_access_token
from pricebook.services.data.data_service import DataService, Row
from pricebook.utils.logger import get_logger

logger = get_logger("auth.service")


class SessionEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    INITIAL_SESSION = "INITIAL_SESSION"


class Session(BaseModel):
    user_id: str
    email: str
    access_token: str


SessionListener = Callable[[SessionEvent, Optional[Session]], Awaitable[None]]


class SessionProvider:
    """Credential checks, token issue and session-change notifications.

    Listeners are awaited in registration order; an exception raised by one
    propagates to whoever triggered the change.
    """

    def __init__(self, data: DataService):
        self.data = data
        self._session: Optional[Session] = None
        self._listeners: list[SessionListener] = []

    def get_current_session(self) -> Optional[Session]:
        return self._session

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # =====================================================
    # SIGN IN
    # =====================================================
    async def sign_in(self, email: str, password: str) -> Session:
        email = (email or "").strip().lower()
        logger.info("Authenticating user", extra={"email": email})

        profiles = await self.data.select("profiles", {"email": email})
        profile = profiles[0] if profiles else None

        if not profile or not verify_password(password, profile["password_hash"]):
            logger.warning("Invalid credentials", extra={"email": email})
            raise AuthenticationError("Invalid credentials")

        session = Session(
            user_id=profile["id"],
            email=profile["email"],
            access_token=create_access_token(profile["id"], profile["email"]),
        )
        await self._set_session(SessionEvent.SIGNED_IN, session)

        logger.info("Login successful", extra={"user_id": session.user_id})
        return self._require_session()

    async def resume_session(self, token: str) -> Session:
        claims = decode_access_token(token)

        profiles = await self.data.select("profiles", {"id": claims.sub})
        if not profiles:
            logger.warning("Token user not found", extra={"user_id": claims.sub})
            raise AuthenticationError("User not found")

        session = Session(
            user_id=profiles[0]["id"],
            email=profiles[0]["email"],
            access_token=token,
        )
        await self._set_session(SessionEvent.INITIAL_SESSION, session)
        return self._require_session()

    # =====================================================
    # SIGN UP
    # =====================================================
    async def sign_up(self, email: str, password: str, full_name: str = "") -> Row:
        """Register a profile with a ``user`` role and no capabilities.

        Does not change the current session.
        """
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError("Email is required")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        if await self.data.select("profiles", {"email": email}):
            raise ConflictError("User already exists", ErrorCode.USER_EMAIL_EXISTS)

        user_id = str(uuid.uuid4())
        async with self.data.transaction():
            try:
                profile = await self.data.insert(
                    "profiles",
                    {
                        "id": user_id,
                        "email": email,
                        "full_name": full_name.strip(),
                        "password_hash": hash_password(password),
                    },
                )
            except ConflictError:
                raise ConflictError("User already exists", ErrorCode.USER_EMAIL_EXISTS)

            await self.data.insert("user_roles", {"user_id": user_id, "role": Role.USER})
            await self.data.insert(
                "user_permissions",
                {
                    "user_id": user_id,
                    "can_add": False,
                    "can_edit": False,
                    "can_delete": False,
                    "is_blocked": False,
                },
            )

        logger.info("User registered", extra={"user_id": user_id, "email": email})
        return {k: v for k, v in profile.items() if k != "password_hash"}

    # =====================================================
    # SIGN OUT
    # =====================================================
    async def sign_out(self):
        if self._session is None:
            return
        logger.info("Logging out user", extra={"user_id": self._session.user_id})
        await self._set_session(SessionEvent.SIGNED_OUT, None)

    # =====================================================
    # INTERNALS
    # =====================================================
    async def _set_session(self, event: SessionEvent, session: Optional[Session]):
        self._session = session
        for listener in list(self._listeners):
            await listener(event, session)

    def _require_session(self) -> Session:
        # a listener may have signed the session out again
        if self._session is None:
            raise AuthenticationError("Session was terminated")
        return self._session
