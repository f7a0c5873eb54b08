"""Client-side sync engine.

This package provides the state components a mail UI drives:
- Selection engine for single, toggle and range selection
- Tracker for emails already merged into custom threads
- Merge dialog state machine and merge commit flow
- Optimistic mutation coordinator for read, flag, move and delete
"""

from mailsync.sync.merge_dialog import (
    MergeDialogCoordinator,
    MergeDialogState,
    commit_merge,
)
from mailsync.sync.mutations import (
    FailurePolicy,
    MutationPlan,
    OptimisticMutationCoordinator,
    OptimisticView,
)
from mailsync.sync.selection import SelectionEngine, SelectionMode, SelectionState
from mailsync.sync.threads import ThreadAssociationTracker

__all__ = [
    # Selection
    "SelectionEngine",
    "SelectionMode",
    "SelectionState",
    # Threads
    "ThreadAssociationTracker",
    # Merge dialog
    "MergeDialogCoordinator",
    "MergeDialogState",
    "commit_merge",
    # Mutations
    "FailurePolicy",
    "MutationPlan",
    "OptimisticMutationCoordinator",
    "OptimisticView",
]
