"""
Bounded undo/redo history of picker snapshots.
"""

from .exceptions import ConfigurationError
from .models import PickerSnapshot


class History:
    """
    Snapshots plus a cursor.

    Holds at most ``history_length + 1`` entries: the current state and up to
    ``history_length`` states to undo to. Snapshots are immutable, so entries
    never alias each other's mutable state.
    """

    def __init__(self, history_length: int = 3):
        if history_length < 0:
            raise ConfigurationError(f"history_length must be >= 0, got {history_length}")
        self.history_length: int = history_length
        self._entries = list[PickerSnapshot]()
        self._position: int = -1

    def push(self, snapshot: PickerSnapshot) -> None:
        """Drop any redo tail, append ``snapshot`` and make it current."""
        del self._entries[self._position + 1 :]
        self._entries.append(snapshot)
        if len(self._entries) > self.history_length + 1:
            del self._entries[0]
        self._position = len(self._entries) - 1

    def can_undo(self) -> bool:
        return self._position > 0

    def can_redo(self) -> bool:
        return self._position < len(self._entries) - 1

    def undo(self) -> PickerSnapshot | None:
        """Step back; returns the snapshot to reinstall, or None at the start."""
        if not self.can_undo():
            return None
        self._position -= 1
        return self._entries[self._position]

    def redo(self) -> PickerSnapshot | None:
        """Step forward; returns the snapshot to reinstall, or None at the end."""
        if not self.can_redo():
            return None
        self._position += 1
        return self._entries[self._position]

    @property
    def current(self) -> PickerSnapshot | None:
        if self._position < 0:
            return None
        return self._entries[self._position]

    @property
    def position(self) -> int:
        return self._position

    def __len__(self) -> int:
        return len(self._entries)
