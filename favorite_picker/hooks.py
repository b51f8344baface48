"""
Hooks around loading persisted state.
"""

from collections.abc import Callable, Sequence

from typing_extensions import override

from .models import ItemId


class LoadHooks:
    """
    Overridable hooks called while a session loads its persisted state.

    The defaults leave the state alone and ignore repair notifications.
    """

    def modify_state(self, state: object) -> object | None:
        """Adjust raw persisted state before its shape is validated; None discards it."""
        return state

    def on_load_state(self, missing_items: Sequence[ItemId], extra_items: Sequence[ItemId]) -> None:
        """
        Called after a persisted state has been restored and repaired.

        Args:
            missing_items: Ids that were absent from the state and have been re-added
            extra_items: Ids that the catalog or filter no longer admits and were removed
        """
        pass


class CallableLoadHooks(LoadHooks):
    """LoadHooks backed by optional ``modify_state`` and ``on_load_state`` functions."""

    def __init__(
        self,
        modify_state: Callable[[object], object | None] | None = None,
        on_load_state: Callable[[Sequence[ItemId], Sequence[ItemId]], None] | None = None,
    ):
        self._modify_state = modify_state
        self._on_load_state = on_load_state

    @override
    def modify_state(self, state: object) -> object | None:
        if self._modify_state is None:
            return state
        return self._modify_state(state)

    @override
    def on_load_state(self, missing_items: Sequence[ItemId], extra_items: Sequence[ItemId]) -> None:
        if self._on_load_state is not None:
            self._on_load_state(missing_items, extra_items)
