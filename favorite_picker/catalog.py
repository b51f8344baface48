"""
Item catalog.

Immutable mapping from item id to Item, built once and shared read-only by the
engine and the session.
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from .exceptions import ConfigurationError, ValidationError
from .logging_config import get_logger
from .models import Item, ItemId

logger = get_logger("catalog")

ITEM_FIELDS = ("id", "name", "image", "shortcode")


class ItemCatalog:
    """
    Read-only catalog of items keyed by id.

    Construction validates the configuration: every item needs an id, ids are
    unique, and with a fixed ``shortcode_length`` every shortcode has exactly
    that length.
    """

    def __init__(self, items: Iterable[Item], shortcode_length: int | None = None):
        """
        Build the catalog.

        Args:
            items: Items in display order
            shortcode_length: Fixed share-code width, or None if sharing is unused

        Raises:
            ConfigurationError: On a missing id, a duplicate id or a bad shortcode
        """
        if shortcode_length is not None and shortcode_length <= 0:
            raise ConfigurationError(f"shortcode_length must be positive, got {shortcode_length}")

        self.shortcode_length: int | None = shortcode_length
        self._items = dict[ItemId, Item]()
        self._shortcodes = dict[str, ItemId]()

        for item in items:
            if item.id is None:
                raise ConfigurationError(f"Item without an id: {item!r}")
            if item.id in self._items:
                raise ConfigurationError(
                    f"More than one item with the same id ({item.id!r}); item ids must be unique"
                )
            if shortcode_length is not None and (
                not item.shortcode or len(item.shortcode) != shortcode_length
            ):
                raise ConfigurationError(
                    f"Item {item.id!r} has shortcode {item.shortcode!r}, expected exactly {shortcode_length} characters"
                )
            if item.shortcode:
                if item.shortcode in self._shortcodes:
                    logger.warning(
                        f"Shortcode {item.shortcode!r} is shared by {self._shortcodes[item.shortcode]!r} and {item.id!r}; using {item.id!r}"
                    )
                self._shortcodes[item.shortcode] = item.id
            self._items[item.id] = item

        logger.debug(f"Catalog built with {len(self._items)} items")

    @classmethod
    def from_records(
        cls,
        records: Iterable[Item | Mapping[str, Any]],
        shortcode_length: int | None = None,
    ) -> "ItemCatalog":
        """
        Build a catalog from plain mappings (Items are taken as they are).

        Keys other than id/name/image/shortcode are kept as item attributes.

        Raises:
            ConfigurationError: If a record has no id or the catalog is invalid
        """
        items = [
            record if isinstance(record, Item) else item_from_record(record, index)
            for index, record in enumerate(records)
        ]
        return cls(items, shortcode_length=shortcode_length)

    def ids(self) -> list[ItemId]:
        """All ids in catalog order."""
        return list(self._items)

    def list_items(self) -> list[Item]:
        return list(self._items.values())

    def get_item(self, item_id: ItemId) -> Item:
        """Get a specific item by id."""
        if item_id not in self._items:
            raise KeyError(f"Item not found: {item_id!r}")
        return self._items[item_id]

    def resolve(self, item_ids: Iterable[ItemId]) -> list[Item]:
        """Map ids to items, skipping ids the catalog does not know."""
        return [self._items[i] for i in item_ids if i in self._items]

    def id_for_shortcode(self, shortcode: str) -> ItemId | None:
        return self._shortcodes.get(shortcode)

    def __contains__(self, item_id: object) -> bool:
        try:
            return item_id in self._items
        except TypeError:
            # Unhashable values are never ids
            return False

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)


def item_from_record(record: Mapping[str, Any], index: int = 0) -> Item:
    """
    Convert a plain mapping to an Item.

    Raises:
        ConfigurationError: If the record has no usable id
    """
    if not isinstance(record, Mapping):
        raise ConfigurationError(f"Item record {index} must be a mapping, got {type(record).__name__}")
    if record.get("id") is None:
        raise ConfigurationError(f"Item record {index} has no id: {dict(record)!r}")
    try:
        return Item(
            id=record["id"],
            name=record.get("name"),
            image=record.get("image"),
            shortcode=record.get("shortcode"),
            attributes={k: v for k, v in record.items() if k not in ITEM_FIELDS},
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid item record {index}: {e}") from e
