# pricebook/services/workspace.py

from typing import Any, Mapping, Optional

from pricebook.core.exceptions import AuthenticationError, BlockedAccountError
from pricebook.schemas.products.product_schemas import ProductOut
from pricebook.schemas.products.price_history_schemas import PriceHistoryOut
from pricebook.schemas.users.user_schemas import EffectivePermissions
from pricebook.services.auth.session_service import SessionProvider, SessionEvent, Session
from pricebook.services.data.data_service import DataService
from pricebook.services.products.product_repository import ProductRepository, utcnow
from pricebook.services.products.price_history_service import fetch_price_history
from pricebook.services.users.permission_service import resolve_permissions, ensure_capability
from pricebook.utils.logger import get_logger

logger = get_logger(__name__)


async def guard_session(
    data: DataService,
    sessions: SessionProvider,
    session: Session,
) -> EffectivePermissions:
    """Resolve permissions for a fresh session; a blocked account is signed out."""
    permissions = await resolve_permissions(data, session.user_id)

    if permissions.is_blocked:
        logger.warning("Blocked account signed out", extra={"user_id": session.user_id})
        await sessions.sign_out()
        raise BlockedAccountError("Your account has been blocked. Contact an administrator.")

    return permissions


class InventoryWorkspace:
    """Ties a SessionProvider to a ProductRepository.

    Permissions are resolved on every session change and a blocked account
    is signed out before any product is loaded. Mutations are checked
    against the resolved capability flags before they reach the repository.
    """

    def __init__(self, data: DataService, sessions: SessionProvider, clock=utcnow):
        self.data = data
        self.sessions = sessions
        self.repository = ProductRepository(data, clock)
        self.session: Optional[Session] = None
        self.permissions: Optional[EffectivePermissions] = None
        self._unsubscribe = sessions.on_session_change(self._on_session_change)

    def close(self):
        self._unsubscribe()

    # =====================================================
    # SESSION
    # =====================================================
    async def _on_session_change(self, event: SessionEvent, session: Optional[Session]):
        if session is None:
            self.session = None
            self.permissions = None
            self.repository.clear()
            return
        await self.establish(session)

    async def establish(self, session: Session) -> EffectivePermissions:
        self.session = None
        self.permissions = None
        self.repository.clear()

        permissions = await guard_session(self.data, self.sessions, session)

        self.session = session
        self.permissions = permissions
        await self.repository.load()
        return permissions

    def _actor(self, capability: Optional[str] = None) -> str:
        if self.session is None or self.permissions is None:
            raise AuthenticationError("Not signed in")
        if capability:
            ensure_capability(self.permissions, capability)
        return self.session.user_id

    # =====================================================
    # READS
    # =====================================================
    def search(self, query: str = "", show_archived: bool = False) -> list[ProductOut]:
        self._actor()
        return self.repository.search(query, show_archived)

    async def refresh(self) -> list[ProductOut]:
        self._actor()
        return await self.repository.load()

    async def price_history(self, code: str) -> list[PriceHistoryOut]:
        self._actor()
        return await fetch_price_history(self.data, code)

    # =====================================================
    # GATED MUTATIONS
    # =====================================================
    async def add_product(self, payload: Mapping[str, Any]) -> ProductOut:
        return await self.repository.add(payload, self._actor("can_add"))

    async def update_product(self, code: str, changes: Mapping[str, Any]) -> ProductOut:
        return await self.repository.update(code, changes, self._actor("can_edit"))

    async def delete_product(self, code: str) -> ProductOut:
        return await self.repository.soft_delete(code, self._actor("can_delete"))

    async def restore_product(self, code: str) -> ProductOut:
        return await self.repository.restore(code, self._actor("can_delete"))
