"""Password sign-in with admin gating, sign-out and session recovery."""

import logging
from typing import TYPE_CHECKING

from .exceptions import AuthorizationError, ShopAdminError
from .session_store import SESSION_SLOT
from .types import AuthResult, DeleteResult, Session, SessionResult, User

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger(__name__)

ADMIN_REQUIRED = "Unauthorized: Admin access required"
PROFILE_COLUMNS = "id, is_admin, display_name"


class AuthClient:
    """Auth API wrapper available as ``client.auth``.

    The ``is_admin`` check in :meth:`sign_in` reads a column that the same
    credential can read; it keeps non-admins out of the dashboard but is not
    an authorization boundary. Row level security on the service is.
    """

    def __init__(self, client: "Client"):
        self._client = client

    async def sign_in(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password; only administrators are accepted.

        Returns:
            AuthResult with the Session, or an error. A non-admin account is
            signed out again before the error is returned.
        """
        client = self._client
        try:
            response = await client._request(
                "POST",
                "/auth/v1/token",
                params=[("grant_type", "password")],
                json={"email": email, "password": password},
                headers=client._headers(),
            )
            session = Session.from_response(response.json())
        except (ShopAdminError, ValueError, TypeError, AttributeError) as e:
            return AuthResult(data=None, error=client._error(e, "Sign-in failed"))

        try:
            user = await self._admin_profile(session)
        except AuthorizationError as e:
            await self.sign_out(session)
            return AuthResult(data=None, error=client._error(e, f"Sign-in rejected for {email}"))

        session.user = user
        try:
            client._set_session(session)
        except OSError as e:
            logger.warning("Session for %s kept in memory only: %s", email, e)
        logger.info("Signed in %s", email)
        return AuthResult(data=session, error=None)

    async def _admin_profile(self, session: Session) -> User:
        """Return the session's user marked as admin, or raise AuthorizationError."""
        result = await (
            self._client.from_("profiles")
            .select(PROFILE_COLUMNS)
            .eq("user_id", session.user.id)
            .limit(1)
        )
        if result.error is not None:
            raise AuthorizationError(f"{ADMIN_REQUIRED} (profile lookup failed: {result.error.message})")
        if not result.data or not result.data[0].get("is_admin"):
            raise AuthorizationError(ADMIN_REQUIRED)
        profile = result.data[0]
        user = session.user
        return User(
            id=user.id,
            email=user.email,
            is_admin=True,
            display_name=profile.get("display_name") or user.display_name,
            raw=user.raw,
        )

    async def sign_out(self, session: Session | None = None) -> DeleteResult:
        """Forget the session locally, then tell the service.

        Local state is always cleared and the logout call is always attempted.
        Failures are reported in ``error`` only, a local one taking precedence.
        """
        client = self._client
        session = session or client.session
        local_error = None
        try:
            client._set_session(None)
        except OSError as e:
            local_error = client._error(e, "Clearing stored session failed")
        try:
            await client._request(
                "POST",
                "/auth/v1/logout",
                headers=client._headers(bearer=session.access_token if session else None),
            )
        except ShopAdminError as e:
            remote_error = client._error(e, "Remote logout failed")
            return DeleteResult(error=local_error or remote_error)
        return DeleteResult(error=local_error)

    async def get_session(self) -> SessionResult:
        """Return the current session, recovering it from the durable slot.

        No session is a normal outcome: ``SessionResult(session=None)``.
        """
        client = self._client
        if client.session is not None:
            return SessionResult(session=client.session, error=None)
        try:
            saved = client.session_store.load(SESSION_SLOT)
        except OSError as e:
            return SessionResult(session=None, error=client._error(e, "Reading stored session failed"))
        if not saved:
            return SessionResult(session=None, error=None)
        try:
            session = Session.from_dict(saved)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Discarding stored session: %s", e)
            return SessionResult(session=None, error=None)
        client._session = session
        return SessionResult(session=session, error=None)

    async def get_user(self) -> User | None:
        result = await self.get_session()
        return result.session.user if result.session else None


__all__ = ["ADMIN_REQUIRED", "AuthClient"]
