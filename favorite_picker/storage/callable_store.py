"""
Callable-backed storage implementation.

Lets callers plug in any backing store through a pair of functions.
"""

from collections.abc import Callable

from typing_extensions import override

from ..interfaces import SnapshotState, StateStore


class CallableStore(StateStore):
    """Store that delegates to ``load_state()`` and ``save_state(state)``."""

    def __init__(
        self,
        load_state: Callable[[], object | None] | None = None,
        save_state: Callable[[SnapshotState], None] | None = None,
    ):
        """
        Initialize callable store.

        Args:
            load_state: Returns the persisted snapshot or None (omit to load nothing)
            save_state: Receives every snapshot to persist (omit to discard)
        """
        self.load_state = load_state
        self.save_state = save_state

    @override
    def load(self) -> object | None:
        if self.load_state is None:
            return None
        return self.load_state()

    @override
    def save(self, state: SnapshotState) -> None:
        if self.save_state is not None:
            self.save_state(state)
