"""Bearer token providers for the remote mail service.

Token acquisition belongs to the session layer of the host application;
mailsync only asks for the current token right before each request.

Usage:
    from mailsync.auth import EnvTokenProvider

    provider = EnvTokenProvider("MAILSYNC_TOKEN")
    token = await provider.get_token()  # None when no session exists
"""

import os
from typing import Protocol, runtime_checkable

from mailsync.core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class TokenProvider(Protocol):
    """Anything that can hand out the current session's bearer token."""

    async def get_token(self) -> str | None:
        """Return the bearer token, or None when there is no session."""
        ...


class StaticTokenProvider:
    """Token provider for a token that is already known (tests, scripts)."""

    def __init__(self, token: str | None):
        self._token = token

    async def get_token(self) -> str | None:
        return self._token or None


class EnvTokenProvider:
    """Reads the token from an environment variable on every call.

    Reading lazily lets a long-lived client pick up a token rotated by the
    surrounding process.
    """

    def __init__(self, env_var: str = "MAILSYNC_TOKEN"):
        self.env_var = env_var

    async def get_token(self) -> str | None:
        token = os.environ.get(self.env_var, "").strip()
        if not token:
            logger.debug("No session token in environment", env_var=self.env_var)
            return None
        return token
