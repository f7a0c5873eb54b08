"""Custom thread operations on the remote mail service.

Usage:
    from mailsync.service.threads import ThreadService

    threads = ThreadService(client)
    result = await threads.merge_emails(["e1", "e2"], title="Q3 budget")
    print(result.thread.id, result.added, result.skipped)
"""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from mailsync.core.errors import RemoteRejectedError, TransportFailureError
from mailsync.core.logging import get_logger
from mailsync.models import Thread
from mailsync.service.client import RemoteMailService

logger = get_logger(__name__)


@dataclass
class MergeResult:
    """Outcome of a merge request.

    Attributes:
        thread: The thread the emails now belong to
        added: Email ids the service attached to the thread
        skipped: Email ids the service refused (unknown, foreign, duplicate)
    """

    thread: Thread
    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class ThreadService:
    """Reads and merges custom threads.

    Attributes:
        client: Remote mail service used for every call
    """

    def __init__(self, client: RemoteMailService):
        self.client = client

    @staticmethod
    def _check(data: dict[str, Any], operation: str, default_error: str) -> dict[str, Any]:
        if not data.get("success"):
            raise RemoteRejectedError(
                str(data.get("error") or default_error),
                operation=operation,
                response=data,
            )
        return data

    @staticmethod
    def _parse_thread(raw: Any, operation: str) -> Thread:
        if not isinstance(raw, dict):
            raise TransportFailureError(
                "Response did not include a thread object", operation=operation
            )
        try:
            return Thread.model_validate(raw)
        except ValidationError as e:
            raise TransportFailureError(
                f"Malformed thread in response: {e.error_count()} invalid field(s)",
                operation=operation,
            ) from e

    async def list_threads(self) -> list[Thread]:
        """Fetch every custom thread of the current user, most recent first."""
        data = self._check(
            await self.client.request("GET", "/api/threads"),
            "list_threads",
            "Failed to load threads",
        )
        threads = [self._parse_thread(raw, "list_threads") for raw in data.get("threads") or []]
        logger.debug("Threads listed", count=len(threads))
        return threads

    async def get_thread(self, thread_id: str) -> Thread:
        """Fetch one thread with its items.

        The service returns items alongside the thread, either nested under
        the thread or as a sibling ``items`` list.
        """
        data = self._check(
            await self.client.request("GET", f"/api/threads/{quote(thread_id, safe='')}"),
            "get_thread",
            "Failed to load thread",
        )
        raw = dict(data.get("thread") or {})
        if "items" not in raw and "items" in data:
            raw["items"] = data["items"]
        return self._parse_thread(raw, "get_thread")

    async def merge_emails(
        self,
        email_ids: list[str],
        target_thread_id: str | None = None,
        title: str | None = None,
    ) -> MergeResult:
        """Merge emails into a new thread, or into ``target_thread_id``.

        Args:
            email_ids: Emails to merge (at least one)
            target_thread_id: Existing thread to merge into; None creates one
            title: Optional title; blank titles are not sent

        Raises:
            ValueError: If email_ids is empty (no request is made)
            RemoteRejectedError: If the service refuses the merge
        """
        if not email_ids:
            raise ValueError("At least one email is required to merge")

        body: dict[str, Any] = {"emailIds": list(email_ids)}
        if target_thread_id:
            body["targetThreadId"] = target_thread_id
        if title and title.strip():
            body["title"] = title.strip()

        data = self._check(
            await self.client.request("POST", "/api/threads/merge", json=body),
            "merge_emails",
            "Failed to merge emails",
        )
        result = MergeResult(
            thread=self._parse_thread(data.get("thread"), "merge_emails"),
            added=[str(i) for i in data.get("added") or []],
            skipped=[str(i) for i in data.get("skipped") or []],
        )

        logger.info(
            "Emails merged into thread",
            thread_id=result.thread.id,
            added=len(result.added),
            skipped=len(result.skipped),
            new_thread=target_thread_id is None,
        )
        return result
