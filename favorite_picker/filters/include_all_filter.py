"""
Include-all filter implementation.

Admits every catalog item regardless of settings.
"""

from typing_extensions import override

from ..catalog import ItemCatalog
from ..interfaces import ItemFilter
from ..models import ItemId, Settings


class IncludeAllFilter(ItemFilter):
    """Filter that admits the whole catalog."""

    @override
    def filter_items(self, catalog: ItemCatalog, settings: Settings) -> list[ItemId]:
        return catalog.ids()

    @override
    def should_include(self, item_id: ItemId, catalog: ItemCatalog, settings: Settings) -> bool:
        return item_id in catalog
