"""
In-memory storage implementations.
"""

import json

from typing_extensions import override

from ..interfaces import SnapshotState, StateStore
from ..logging_config import get_logger

# Module-level logger
logger = get_logger("memory_store")


class NullStore(StateStore):
    """Store that never has a saved state and discards saves."""

    @override
    def load(self) -> object | None:
        return None

    @override
    def save(self, state: SnapshotState) -> None:
        pass


class MemoryStore(StateStore):
    """
    Single-key string store kept in memory.

    Holds the JSON text of the last saved snapshot, the same way a browser
    key-value store would.
    """

    def __init__(self, raw: str | None = None):
        """
        Initialize memory store.

        Args:
            raw: Initial stored text (e.g. a previously saved snapshot)
        """
        self.raw: str | None = raw
        self.save_count: int = 0

    @override
    def load(self) -> object | None:
        if self.raw is None:
            return None
        try:
            return json.loads(self.raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable stored state: {e}")
            return None

    @override
    def save(self, state: SnapshotState) -> None:
        self.raw = json.dumps(state, ensure_ascii=False)
        self.save_count += 1
