"""State machine for the "merge into thread" dialog, and the merge commit.

The dialog is either closed or open with a payload. Closing always resets
the payload, so ids from one merge can never surface in the next open.

Usage:
    dialog = MergeDialogCoordinator()
    dialog.open(selection.selected_ids(visible_ids), default_title="Q3 budget")

    result = await commit_merge(dialog, thread_service, tracker, selection)
    # dialog.state.is_open is now False and the ids are tracked
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mailsync.core.logging import get_logger

if TYPE_CHECKING:
    from mailsync.service.threads import MergeResult, ThreadService
    from mailsync.sync.selection import SelectionEngine
    from mailsync.sync.threads import ThreadAssociationTracker

logger = get_logger(__name__)


@dataclass(frozen=True)
class MergeDialogState:
    """Snapshot of the dialog.

    Attributes:
        is_open: Whether the dialog is showing
        email_ids: Emails to merge, in the order they were given
        target_thread_id: Existing thread to merge into, if preselected
        default_title: Title to prefill, if any
    """

    is_open: bool = False
    email_ids: tuple[str, ...] = ()
    target_thread_id: str | None = None
    default_title: str | None = None


CLOSED = MergeDialogState()


class MergeDialogCoordinator:
    """Open/closed state machine carrying a merge payload."""

    def __init__(self) -> None:
        self._state = CLOSED

    @property
    def state(self) -> MergeDialogState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    def open(
        self,
        email_ids: Iterable[str],
        target_thread_id: str | None = None,
        default_title: str | None = None,
    ) -> None:
        """Open the dialog with the given payload, replacing any current one.

        The ids are stored as given; an empty list is accepted.
        """
        self._state = MergeDialogState(
            is_open=True,
            email_ids=tuple(email_ids),
            target_thread_id=target_thread_id,
            default_title=default_title,
        )
        logger.debug(
            "Merge dialog opened",
            emails=len(self._state.email_ids),
            has_target=target_thread_id is not None,
        )

    def close(self) -> None:
        """Close the dialog and reset the payload to empty defaults."""
        self._state = CLOSED


async def commit_merge(
    dialog: MergeDialogCoordinator,
    threads: ThreadService,
    tracker: ThreadAssociationTracker,
    selection: SelectionEngine | None = None,
    title: str | None = None,
    target_thread_id: str | None = None,
) -> MergeResult:
    """Merge the dialog's emails and update local state on success.

    On success the merged ids are added to the tracker (so the primary list
    hides them), the selection is cleared and the dialog is closed. On
    failure nothing local changes and the error propagates; the dialog stays
    open so the user can retry.

    Args:
        dialog: An open merge dialog
        threads: Thread service used for the merge request
        tracker: Threaded-email tracker to update
        selection: Selection to clear after a successful merge
        title: Title chosen in the dialog (falls back to the default title)
        target_thread_id: Thread chosen in the dialog (falls back to the payload's)

    Raises:
        ValueError: If the dialog is closed or has no emails
        MailServiceError: If the merge request fails
    """
    state = dialog.state
    if not state.is_open:
        raise ValueError("Merge dialog is not open")
    if not state.email_ids:
        raise ValueError("At least one email is required to merge")

    result = await threads.merge_emails(
        list(state.email_ids),
        target_thread_id=target_thread_id or state.target_thread_id,
        title=title if title is not None else state.default_title,
    )

    tracker.add_ids(state.email_ids)
    if selection is not None:
        selection.clear()
    dialog.close()
    return result
