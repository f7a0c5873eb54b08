"""Session token providers for the remote mail service.

Usage:
    from mailsync.auth import StaticTokenProvider

    provider = StaticTokenProvider("token")
"""

from mailsync.auth.session import EnvTokenProvider, StaticTokenProvider, TokenProvider

__all__ = ["EnvTokenProvider", "StaticTokenProvider", "TokenProvider"]
