"""
Favorite Picker - find favorites by repeated elimination

Shows items in small batches, keeps the picked ones and eliminates the rest
until a ranked list of favorites emerges. Supports undo/redo, persisted
progress and shareable favorites lists.
"""

from .models import Decision, EliminatedEntry, Item, PickerSnapshot, ValidationReport
from .interfaces import BatchSizer, CatalogLoader, Chooser, ItemFilter, SettingsDeriver, StateStore
from .catalog import ItemCatalog
from .engine import EliminationEngine
from .session import PickerConfig, PickerSession
from .runner import PickerRunner, RunConfig

__version__ = "0.1.0"
__all__ = [
    "Item",
    "EliminatedEntry",
    "PickerSnapshot",
    "ValidationReport",
    "Decision",
    "ItemFilter",
    "BatchSizer",
    "SettingsDeriver",
    "StateStore",
    "Chooser",
    "CatalogLoader",
    "ItemCatalog",
    "EliminationEngine",
    "PickerConfig",
    "PickerSession",
    "PickerRunner",
    "RunConfig",
]
