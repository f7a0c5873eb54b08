"""Optimistic mail mutations: apply locally, then confirm or revert.

Every operation follows the same protocol:

1. The local effect is applied through the caller's OptimisticView before
   anything is awaited, so the UI changes with zero latency.
2. Exactly one request is sent to the remote mail service. There is no retry
   and no queueing; concurrent calls on the same item interleave freely and
   the last confirmed write wins.
3. On success the on_success callback runs (callers use it to schedule a
   background refetch) and the response payload is returned.
4. On failure (missing token, transport error, or ``success: false``) the
   operation's failure policy runs once and the error is raised.

Failure policies:

- set_read_status writes the pre-call value back (exact revert).
- set_flag leaves the optimistic flag in place. The caller reconciles with a
  refetch.
- move_to_folder and delete_email removed the item from the view, which the
  coordinator cannot undo itself, so it signals restore() to the caller.

Usage:
    coordinator = OptimisticMutationCoordinator(client, view=my_view, on_success=refetch)

    await coordinator.mark_as_read("AAMkAGI...")
    await coordinator.archive("AAMkAGI...")
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from mailsync.core.errors import MailServiceError, RemoteRejectedError, TransportFailureError
from mailsync.core.logging import (
    get_logger,
    reset_correlation_id,
    set_correlation_id,
    short_id,
)
from mailsync.models import (
    ARCHIVE_FOLDER,
    DEFAULT_FLAG_COLOR,
    JUNK_FOLDER,
    TRASH_FOLDER,
    FlagColor,
    FlagStatus,
)
from mailsync.service.client import HttpMethod, RemoteMailService, email_path

logger = get_logger(__name__)


class OptimisticView(Protocol):
    """Capabilities the caller's rendered list exposes to the coordinator.

    The coordinator never holds the caller's collection; it only calls these.
    """

    def apply_update(self, email_id: str, patch: dict[str, Any]) -> None:
        """Merge ``patch`` into the cached item."""
        ...

    def apply_remove(self, email_id: str) -> None:
        """Remove the item from the current view."""
        ...

    def restore(self, email_id: str) -> None:
        """Reinstate an item removed by apply_remove()."""
        ...

    def current(self, email_id: str, field: str) -> Any:
        """Return the cached value of ``field``, or None if unknown."""
        ...


class FailurePolicy(Enum):
    """What the coordinator does locally when a mutation fails."""

    REVERT = "revert"
    REFETCH = "refetch"
    RESTORE = "restore"


@dataclass(frozen=True)
class MutationPlan:
    """Everything one mutation needs, fixed at call entry.

    Attributes:
        operation: Operation name for logs and errors
        email_id: Target mail item
        method: HTTP method of the remote call
        endpoint: Endpoint of the remote call
        body: JSON body of the remote call
        policy: Failure policy
        patch: Optimistic field update, or None for a removal
        snapshot: Pre-call field values written back under REVERT
        default_error: Message used when the service gives none
    """

    operation: str
    email_id: str
    method: HttpMethod
    endpoint: str
    body: dict[str, Any] | None
    policy: FailurePolicy
    patch: dict[str, Any] | None
    snapshot: dict[str, Any] | None
    default_error: str


class OptimisticMutationCoordinator:
    """Runs read, flag, move and delete mutations optimistically.

    Attributes:
        service: Remote mail service receiving the requests
        view: Optional caller view receiving optimistic callbacks
        on_success: Optional callback run after each confirmed mutation
    """

    def __init__(
        self,
        service: RemoteMailService,
        view: OptimisticView | None = None,
        on_success: Callable[[], None] | None = None,
    ):
        self.service = service
        self.view = view
        self.on_success = on_success

    # ------------------------------------------------------------------
    # Protocol
    # ------------------------------------------------------------------

    def _apply(self, plan: MutationPlan) -> None:
        if self.view is not None:
            if plan.patch is None:
                self.view.apply_remove(plan.email_id)
            else:
                self.view.apply_update(plan.email_id, dict(plan.patch))
        logger.debug(
            "optimistic_applied",
            operation=plan.operation,
            email_id=short_id(plan.email_id),
        )

    def _compensate(self, plan: MutationPlan) -> None:
        if plan.policy is FailurePolicy.REVERT and plan.snapshot is not None:
            if self.view is not None:
                self.view.apply_update(plan.email_id, dict(plan.snapshot))
            logger.info(
                "mutation_reverted",
                operation=plan.operation,
                email_id=short_id(plan.email_id),
            )
        elif plan.policy is FailurePolicy.RESTORE:
            if self.view is not None:
                self.view.restore(plan.email_id)
            logger.info(
                "restore_signalled",
                operation=plan.operation,
                email_id=short_id(plan.email_id),
            )
        else:
            logger.info(
                "optimistic_value_kept",
                operation=plan.operation,
                email_id=short_id(plan.email_id),
            )

    async def _execute(self, plan: MutationPlan) -> dict[str, Any]:
        """Apply, call, then confirm or compensate. See the module docstring."""
        token = set_correlation_id(uuid.uuid4().hex)
        try:
            self._apply(plan)

            try:
                data = await self.service.request(plan.method, plan.endpoint, json=plan.body)
                if not data.get("success"):
                    raise RemoteRejectedError(
                        str(data.get("error") or plan.default_error),
                        response=data,
                    )
            except MailServiceError as e:
                if e.email_id is None:
                    e.email_id = plan.email_id
                if e.operation is None:
                    e.operation = plan.operation
                self._fail(plan, e)
                raise
            except Exception as e:
                error = TransportFailureError(
                    str(e) or plan.default_error,
                    email_id=plan.email_id,
                    operation=plan.operation,
                )
                self._fail(plan, error)
                raise error from e

            logger.info(
                "mutation_confirmed",
                operation=plan.operation,
                email_id=short_id(plan.email_id),
            )
            if self.on_success is not None:
                self.on_success()
            return data
        finally:
            reset_correlation_id(token)

    def _fail(self, plan: MutationPlan, error: MailServiceError) -> None:
        logger.warning(
            "mutation_failed",
            operation=plan.operation,
            email_id=short_id(plan.email_id),
            error_type=type(error).__name__,
            error=error.message,
        )
        self._compensate(plan)

    # ------------------------------------------------------------------
    # Read status
    # ------------------------------------------------------------------

    async def set_read_status(
        self,
        email_id: str,
        read: bool,
        previous: bool | None = None,
    ) -> dict[str, Any]:
        """Set the read flag, reverting it locally if the service refuses.

        Args:
            email_id: Target mail item
            read: New read state
            previous: Read state before the call. When omitted it is read
                from the view, falling back to ``not read`` if the view
                does not know the item.

        Returns:
            The service response payload
        """
        snapshot = previous
        if snapshot is None and self.view is not None:
            cached = self.view.current(email_id, "read")
            if isinstance(cached, bool):
                snapshot = cached
        if snapshot is None:
            snapshot = not read
        return await self._execute(
            MutationPlan(
                operation="set_read_status",
                email_id=email_id,
                method="PATCH",
                endpoint=email_path(email_id, "read"),
                body={"read": read},
                policy=FailurePolicy.REVERT,
                patch={"read": read},
                snapshot={"read": snapshot},
                default_error="Failed to update read status",
            )
        )

    async def mark_as_read(self, email_id: str, previous: bool | None = None) -> dict[str, Any]:
        return await self.set_read_status(email_id, True, previous)

    async def mark_as_unread(
        self, email_id: str, previous: bool | None = None
    ) -> dict[str, Any]:
        return await self.set_read_status(email_id, False, previous)

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    async def set_flag(
        self,
        email_id: str,
        flag_status: FlagStatus,
        flag_color: FlagColor | None = None,
    ) -> dict[str, Any]:
        """Set flag status and colour.

        A failure leaves the optimistic flag in the view; the caller is
        expected to refetch to recover the confirmed value.
        """
        fields = {"flagStatus": flag_status, "flagColor": flag_color}
        return await self._execute(
            MutationPlan(
                operation="set_flag",
                email_id=email_id,
                method="PATCH",
                endpoint=email_path(email_id, "flag"),
                body=dict(fields),
                policy=FailurePolicy.REFETCH,
                patch=fields,
                snapshot=None,
                default_error="Failed to update flag",
            )
        )

    async def add_flag(self, email_id: str, color: FlagColor = DEFAULT_FLAG_COLOR) -> dict[str, Any]:
        return await self.set_flag(email_id, "flagged", color)

    async def remove_flag(self, email_id: str) -> dict[str, Any]:
        return await self.set_flag(email_id, "notFlagged", None)

    # ------------------------------------------------------------------
    # Folder moves
    # ------------------------------------------------------------------

    async def move_to_folder(self, email_id: str, folder: str) -> dict[str, Any]:
        """Move an item to ``folder``, removing it from the current view.

        Any destination the service understands is accepted; the well-known
        ones are listed in mailsync.models.MailFolder.

        Raises:
            ValueError: If folder is empty (nothing is applied or sent)
        """
        if not folder:
            raise ValueError("Destination folder is required")
        return await self._execute(
            MutationPlan(
                operation="move_to_folder",
                email_id=email_id,
                method="POST",
                endpoint=email_path(email_id, "move"),
                body={"destination": folder},
                policy=FailurePolicy.RESTORE,
                patch=None,
                snapshot=None,
                default_error="Failed to move email",
            )
        )

    async def archive(self, email_id: str) -> dict[str, Any]:
        return await self.move_to_folder(email_id, ARCHIVE_FOLDER)

    async def move_to_junk(self, email_id: str) -> dict[str, Any]:
        return await self.move_to_folder(email_id, JUNK_FOLDER)

    async def move_to_trash(self, email_id: str) -> dict[str, Any]:
        return await self.move_to_folder(email_id, TRASH_FOLDER)

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete_email(self, email_id: str) -> dict[str, Any]:
        """Permanently delete an item, removing it from the view first."""
        return await self._execute(
            MutationPlan(
                operation="delete_email",
                email_id=email_id,
                method="DELETE",
                endpoint=email_path(email_id),
                body=None,
                policy=FailurePolicy.RESTORE,
                patch=None,
                snapshot=None,
                default_error="Failed to delete email",
            )
        )
