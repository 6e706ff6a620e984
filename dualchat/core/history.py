"""bounded linear undo/redo history over notepad text snapshots."""

from typing import Optional

from dualchat.config import MAX_NOTEPAD_HISTORY


class NotepadHistory:
    """
    linear snapshot history with a cursor.

    snapshots[cursor] is always the current content and there is always at
    least one snapshot. recording after an undo truncates the redo branch;
    branching histories are not supported.
    """

    def __init__(
        self,
        snapshots: Optional[list[str]] = None,
        cursor: Optional[int] = None,
        max_snapshots: int = MAX_NOTEPAD_HISTORY,
    ) -> None:
        if max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")
        self.max_snapshots = max_snapshots
        self._snapshots: list[str] = list(snapshots) if snapshots else [""]
        if cursor is None or not 0 <= cursor < len(self._snapshots):
            cursor = len(self._snapshots) - 1
        self._cursor = cursor
        self._enforce_bound()

    @property
    def snapshots(self) -> list[str]:
        """copy of the snapshot sequence, oldest first."""
        return list(self._snapshots)

    @property
    def cursor(self) -> int:
        """index of the current snapshot."""
        return self._cursor

    @property
    def current(self) -> str:
        """current notepad content."""
        return self._snapshots[self._cursor]

    @property
    def can_undo(self) -> bool:
        """True when an older snapshot exists."""
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        """True when a newer snapshot exists."""
        return self._cursor < len(self._snapshots) - 1

    def __len__(self) -> int:
        return len(self._snapshots)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NotepadHistory):
            return NotImplemented
        return self._snapshots == other._snapshots and self._cursor == other._cursor

    def __repr__(self) -> str:
        return f"NotepadHistory(snapshots={self._snapshots!r}, cursor={self._cursor})"

    def record(self, text: str) -> bool:
        """
        records a new snapshot.

        Args:
            text: new notepad content

        Returns:
            False if text equals the current snapshot (no-op), True otherwise
        """
        if text == self.current:
            return False
        del self._snapshots[self._cursor + 1 :]
        self._snapshots.append(text)
        self._cursor = len(self._snapshots) - 1
        self._enforce_bound()
        return True

    def undo(self) -> Optional[str]:
        """steps back one snapshot, returns it, or None at the oldest entry."""
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self.current

    def redo(self) -> Optional[str]:
        """steps forward one snapshot, returns it, or None at the newest entry."""
        if not self.can_redo:
            return None
        self._cursor += 1
        return self.current

    def clear(self) -> None:
        """collapses history to the current content only."""
        self._snapshots = [self.current]
        self._cursor = 0

    def _enforce_bound(self) -> None:
        overflow = len(self._snapshots) - self.max_snapshots
        if overflow <= 0:
            return
        # oldest entries go first, then the redo tail; the current snapshot stays
        older = min(overflow, self._cursor)
        del self._snapshots[:older]
        self._cursor -= older
        del self._snapshots[self.max_snapshots :]
