"""
Settings derivers.

Used when seeding a run from a shared favorites list without explicit
settings: the deriver proposes settings under which the shared items fit.
"""

from collections.abc import Callable, Sequence

from typing_extensions import override

from .interfaces import SettingsDeriver
from .models import Item, Settings


class DefaultSettingsDeriver(SettingsDeriver):
    """Proposes no overrides, so the default settings apply."""

    @override
    def derive(self, items: Sequence[Item]) -> Settings:
        return {}


class CallableSettingsDeriver(SettingsDeriver):
    """Delegates to a ``settings_from_favorites(items)`` function."""

    def __init__(self, settings_from_favorites: Callable[[Sequence[Item]], Settings]):
        self.settings_from_favorites = settings_from_favorites

    @override
    def derive(self, items: Sequence[Item]) -> Settings:
        return dict(self.settings_from_favorites(items) or {})
