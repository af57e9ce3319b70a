"""Session handling on top of Supabase Auth.

There is no global "current user". Callers hold a Session (or a
SessionContext that tracks one) and pass it to every operation that needs
identity.
"""

from typing import Any, Optional
from supabase import Client
from b2y.models.session import Session
from b2y.services.supabase_client import create_auth_client, get_supabase_client
from b2y.utils.errors import AuthenticationError, AuthorizationError
from b2y.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)

SIGNED_OUT_EVENTS = ("SIGNED_OUT", "USER_DELETED")


class SessionContext:
    """
    Tracks the signed-in user of one auth client.

    start() subscribes to auth state-change notifications and close()
    releases that subscription. Use it as an async context manager so the
    listener is always torn down.
    """

    def __init__(self, auth_client: Optional[Client] = None):
        self._client = auth_client
        self._subscription: Any = None
        self.session: Optional[Session] = None

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = create_auth_client()
        return self._client

    def start(self) -> None:
        if self._subscription is not None:
            return
        self._subscription = self.client.auth.on_auth_state_change(self._on_auth_state_change)
        logger.debug("Auth state listener registered")

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
            logger.debug("Auth state listener removed")
        self.session = None

    async def __aenter__(self) -> "SessionContext":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _on_auth_state_change(self, event: Any, auth_session: Any) -> None:
        event_name = getattr(event, "value", event)
        if auth_session is None or event_name in SIGNED_OUT_EVENTS:
            self.session = None
        else:
            self.session = Session.from_auth(auth_session)
        logger.info(
            "Auth state changed",
            auth_event=str(event_name),
            user_id=mask_user_id(self.session.user_id) if self.session else None
        )

    def _session_from_response(self, response: Any, action: str) -> Session:
        if response is None or getattr(response, "session", None) is None:
            raise AuthenticationError(f"{action} did not return a session")
        self.session = Session.from_auth(response.session)
        return self.session

    async def sign_up(self, email: str, password: str) -> Session:
        """Create an account and sign it in."""
        try:
            response = self.client.auth.sign_up({"email": email, "password": password})
        except Exception as e:
            raise AuthenticationError(f"Sign up failed: {e}")
        return self._session_from_response(response, "Sign up")

    async def sign_in(self, email: str, password: str) -> Session:
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            raise AuthenticationError(f"Sign in failed: {e}")
        return self._session_from_response(response, "Sign in")

    async def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except Exception as e:
            raise AuthenticationError(f"Sign out failed: {e}")
        self.session = None

    def require_session(self) -> Session:
        if self.session is None:
            raise AuthenticationError("Not signed in")
        return self.session


async def session_from_token(access_token: Optional[str]) -> Session:
    """Validate a bearer token with Supabase Auth and build a Session."""
    if not access_token:
        raise AuthenticationError("Missing access token")

    try:
        response = get_supabase_client().auth.get_user(access_token)
    except Exception as e:
        raise AuthenticationError(f"Invalid access token: {e}")

    user = getattr(response, "user", None)
    if user is None:
        raise AuthenticationError("Invalid access token")
    return Session(user_id=str(user.id), email=getattr(user, "email", None), access_token=access_token)


def bearer_token(authorization_header: Optional[str]) -> Optional[str]:
    """Extract the token from an "Authorization: Bearer ..." header."""
    if not authorization_header:
        return None
    scheme, _, token = authorization_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_owner(session: Session, owner_id: Optional[str]) -> None:
    """Raise AuthorizationError unless the session user owns the resource."""
    if not owner_id or session.user_id != owner_id:
        logger.warning(
            "Ownership check failed",
            user_id=mask_user_id(session.user_id),
            owner_id=mask_user_id(owner_id) if owner_id else None
        )
        raise AuthorizationError("Only the owner can modify this listing")
