"""
JSON catalog loader implementation.

Reads item records from a JSON file: either a list of records or an object
with an ``items`` list.
"""

import json
import typing
from pathlib import Path

from typing_extensions import override

from ..catalog import ItemCatalog
from ..exceptions import ValidationError
from ..interfaces import CatalogLoader
from ..logging_config import get_logger


class JSONCatalogLoader(CatalogLoader):
    """Catalog loader that reads item records from a JSON file."""

    def __init__(self, path: Path, shortcode_length: int | None = None):
        """
        Initialize JSON catalog loader.

        Args:
            path: JSON file holding the item records
            shortcode_length: Fixed share-code width to validate, if any
        """
        self.path: Path = Path(path)
        self.shortcode_length: int | None = shortcode_length

        # Setup logger
        self.logger = get_logger("json_loader")

    def read_records(self) -> list[dict[str, object]]:
        """
        Read the raw item records.

        Raises:
            FileNotFoundError: If the file does not exist
            ValidationError: If the file is not valid JSON or has the wrong shape
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Items file does not exist: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = typing.cast(object, json.load(f))
        except json.JSONDecodeError as e:
            raise ValidationError(f"Items file {self.path} is not valid JSON: {e}") from e

        if isinstance(data, dict) and "items" in data:
            data = typing.cast(object, data["items"])
        if not isinstance(data, list):
            raise ValidationError(f"Items file {self.path} must contain a list of items")

        records = typing.cast(list[object], data)
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise ValidationError(f"Item {index} in {self.path} is not an object")
        return typing.cast(list[dict[str, object]], records)

    @override
    def load(self) -> ItemCatalog:
        """
        Load the catalog.

        Raises:
            ConfigurationError: If the records do not form a valid catalog
        """
        records = self.read_records()
        catalog = ItemCatalog.from_records(records, shortcode_length=self.shortcode_length)
        self.logger.info(f"Loaded {len(catalog)} items from {self.path}")
        return catalog
