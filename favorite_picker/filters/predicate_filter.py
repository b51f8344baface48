"""
Predicate filter implementation.

Admits items for which a user predicate over (item, settings) returns True.
"""

from collections.abc import Callable

from typing_extensions import override

from ..catalog import ItemCatalog
from ..interfaces import ItemFilter
from ..models import Item, ItemId, Settings


class PredicateFilter(ItemFilter):
    """Filter driven by a ``should_include_item(item, settings)`` predicate."""

    def __init__(self, should_include_item: Callable[[Item, Settings], bool]):
        """
        Initialize predicate filter.

        Args:
            should_include_item: Called with the full Item and the current settings
        """
        self.should_include_item = should_include_item

    @override
    def filter_items(self, catalog: ItemCatalog, settings: Settings) -> list[ItemId]:
        return [item.id for item in catalog if self.should_include_item(item, settings)]

    @override
    def should_include(self, item_id: ItemId, catalog: ItemCatalog, settings: Settings) -> bool:
        if item_id not in catalog:
            return False
        return bool(self.should_include_item(catalog.get_item(item_id), settings))
