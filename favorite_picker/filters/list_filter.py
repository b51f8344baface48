"""
List filter implementation.

Admits the ids returned by a ``get_filtered_items(settings)`` function.
"""

import copy
from collections.abc import Callable, Iterable

from typing_extensions import override

from ..catalog import ItemCatalog
from ..interfaces import ItemFilter
from ..logging_config import get_logger
from ..models import ItemId, Settings

# Module-level logger
logger = get_logger("list_filter")


class ListFilter(ItemFilter):
    """Filter driven by a function that lists the admitted ids."""

    def __init__(self, get_filtered_items: Callable[[Settings], Iterable[ItemId]]):
        self.get_filtered_items = get_filtered_items
        # Admitted ids for the settings value last seen by should_include
        self._admitted: tuple[Settings, frozenset[ItemId]] | None = None

    @override
    def filter_items(self, catalog: ItemCatalog, settings: Settings) -> list[ItemId]:
        """Return the listed ids in the order given, minus unknown ids and repeats."""
        self._admitted = None
        result = list[ItemId]()
        seen = set[ItemId]()
        for item_id in self.get_filtered_items(settings):
            if item_id not in catalog:
                logger.warning(f"Filter returned unknown item id {item_id!r}; ignoring it")
                continue
            if item_id not in seen:
                seen.add(item_id)
                result.append(item_id)
        return result

    @override
    def should_include(self, item_id: ItemId, catalog: ItemCatalog, settings: Settings) -> bool:
        """Membership test; the listed ids are fetched once per settings value."""
        if self._admitted is None or self._admitted[0] != settings:
            self._admitted = (copy.deepcopy(settings), frozenset(self.get_filtered_items(settings)))
        return item_id in catalog and item_id in self._admitted[1]
