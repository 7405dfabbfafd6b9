from abc import ABC, abstractmethod
import asyncio
import logging
from typing import Any, Dict, Optional

from travelai.core.errors import AuthError
from travelai.domain.models import AuthenticatedUser

logger = logging.getLogger(__name__)


def bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an ``Authorization: Bearer ...`` header or raise AuthError."""
    if not authorization or not authorization.strip():
        raise AuthError("No authorization header")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Invalid user token")
    return token.strip()


class IdentityProvider(ABC):
    @abstractmethod
    async def verify(self, token: str) -> AuthenticatedUser:
        """Return the user the token belongs to, or raise AuthError."""
        raise NotImplementedError


class InMemoryIdentityProvider(IdentityProvider):
    """Token table for local runs and tests. An empty table rejects every token."""

    def __init__(self, users: Optional[Dict[str, AuthenticatedUser]] = None):
        self._users: Dict[str, AuthenticatedUser] = dict(users or {})

    def register(self, token: str, user: AuthenticatedUser) -> None:
        self._users[token] = user

    async def verify(self, token: str) -> AuthenticatedUser:
        user = self._users.get(token)
        if user is None:
            raise AuthError("Invalid user token")
        return user


class SupabaseIdentityProvider(IdentityProvider):
    def __init__(self, client):
        if client is None:
            raise ValueError("Supabase client is required for SupabaseIdentityProvider")
        self.client = client

    async def verify(self, token: str) -> AuthenticatedUser:
        try:
            response = await asyncio.to_thread(self.client.auth.get_user, token)
        except Exception as exc:  # supabase raises AuthApiError and transport errors alike
            logger.warning("User authentication error: %s", exc)
            raise AuthError("Invalid user token") from exc

        user = getattr(response, "user", None)
        if user is None:
            raise AuthError("Invalid user token")
        return _to_authenticated_user(user)


def _to_authenticated_user(user: Any) -> AuthenticatedUser:
    metadata = getattr(user, "user_metadata", None) or {}
    email = getattr(user, "email", None)
    return AuthenticatedUser(
        id=str(user.id),
        email=email,
        display_name=metadata.get("full_name") or email,
    )
