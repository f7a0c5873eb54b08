"""Remote mail service access.

Provides the async HTTP transport and the custom thread endpoints.

Usage:
    from mailsync.service import MailServiceClient, ThreadService

    client = MailServiceClient(base_url, token_provider)
    threads = ThreadService(client)
"""

from mailsync.service.client import MailServiceClient, RemoteMailService, email_path
from mailsync.service.threads import MergeResult, ThreadService

__all__ = [
    "MailServiceClient",
    "MergeResult",
    "RemoteMailService",
    "ThreadService",
    "email_path",
]
