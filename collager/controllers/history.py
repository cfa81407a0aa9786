"""Linear undo/redo history over immutable photo collections.

:class:`HistoryStore` keeps an ordered list of snapshots and a cursor into
it.  Pushing a snapshot drops everything after the cursor first, so there is
a single line of history and no branches.  Moving past either end is a quiet
no-op.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..collection import PhotoCollection

LOGGER = logging.getLogger(__name__)


class HistoryStore:
    """Cursor-addressed sequence of :class:`PhotoCollection` snapshots."""

    def __init__(
        self,
        initial: PhotoCollection = PhotoCollection.EMPTY,
        *,
        limit: Optional[int] = None,
    ) -> None:
        if limit is not None and limit <= 0:
            raise ValueError("limit must be greater than zero")
        self._limit = limit
        self._snapshots: List[PhotoCollection] = [self._checked(initial)]
        self._cursor = 0

    @staticmethod
    def _checked(snapshot: PhotoCollection) -> PhotoCollection:
        if not isinstance(snapshot, PhotoCollection):
            raise TypeError(f"Snapshots must be PhotoCollection, got {type(snapshot).__name__}")
        return snapshot

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def limit(self) -> Optional[int]:
        return self._limit

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def current(self) -> PhotoCollection:
        """Return the snapshot under the cursor."""

        return self._snapshots[self._cursor]

    def snapshots(self) -> Tuple[PhotoCollection, ...]:
        return tuple(self._snapshots)

    def push(self, snapshot: PhotoCollection) -> int:
        """Append ``snapshot`` after the cursor, discarding any redo entries."""

        snapshot = self._checked(snapshot)
        dropped = len(self._snapshots) - 1 - self._cursor
        del self._snapshots[self._cursor + 1:]
        self._snapshots.append(snapshot)
        self._cursor += 1
        if dropped:
            LOGGER.debug("History: dropped %d redo entr%s", dropped, "y" if dropped == 1 else "ies")
        if self._limit is not None and len(self._snapshots) > self._limit:
            self._drop_oldest(len(self._snapshots) - self._limit)
        return self._cursor

    def undo(self) -> bool:
        """Step back one snapshot; return whether the cursor moved."""

        if not self.can_undo:
            LOGGER.debug("History: undo at oldest entry ignored")
            return False
        self._cursor -= 1
        return True

    def redo(self) -> bool:
        """Step forward one snapshot; return whether the cursor moved."""

        if not self.can_redo:
            LOGGER.debug("History: redo at newest entry ignored")
            return False
        self._cursor += 1
        return True

    def replace_current(self, snapshot: PhotoCollection) -> None:
        """Swap the snapshot under the cursor without adding an entry."""

        self._snapshots[self._cursor] = self._checked(snapshot)

    def reset(self, snapshot: PhotoCollection = PhotoCollection.EMPTY) -> None:
        """Start over with a single-entry history."""

        self._snapshots = [self._checked(snapshot)]
        self._cursor = 0

    def trim(self, keep: int) -> int:
        """Drop the oldest entries so at most ``keep`` remain before the cursor.

        Returns the number of entries removed.
        """

        if keep < 0:
            raise ValueError("keep must be non-negative")
        excess = self._cursor - keep
        if excess <= 0:
            return 0
        self._drop_oldest(excess)
        return excess

    def _drop_oldest(self, count: int) -> None:
        del self._snapshots[:count]
        self._cursor -= count
        LOGGER.debug("History: dropped %d oldest entr%s", count, "y" if count == 1 else "ies")
