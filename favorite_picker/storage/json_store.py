"""
JSON file storage implementation.

Persists the current snapshot under a single key of a JSON object file, so
several pickers (one key each) can share one state file.
"""

import json
import typing
from pathlib import Path
from typing import Any

from typing_extensions import override

from ..interfaces import SnapshotState, StateStore
from ..logging_config import get_logger

# Module-level logger
logger = get_logger("json_store")


class JSONFileStore(StateStore):
    """
    JSON-file-backed single-key store.

    The file holds ``{key: snapshot, ...}``; saving rewrites the file with the
    new snapshot under this store's key and leaves other keys untouched.
    """

    path: Path
    key: str

    def __init__(self, path: Path, key: str = "picker-state"):
        """
        Initialize JSON file store.

        Args:
            path: Path to the JSON state file (created on first save)
            key: Key under which this picker's snapshot is stored
        """
        self.path = Path(path)
        self.key = key

        logger.info(f"JSON state store initialized: path={self.path}, key={self.key}")

    def _read_all(self) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Read the whole key mapping; unreadable files count as empty."""
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = typing.cast(object, json.load(f))
            assert isinstance(data, dict), "state file must contain a JSON object"
            return typing.cast(dict[str, Any], data)  # pyright: ignore[reportExplicitAny]
        except (json.JSONDecodeError, AssertionError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}

    @override
    def load(self) -> object | None:
        """Load this key's snapshot, or None if nothing usable is stored."""
        state = self._read_all().get(self.key)
        if state is None:
            logger.debug(f"No saved state under key {self.key!r}")
            return None

        logger.info(f"Loaded saved state from {self.path} (key {self.key!r})")
        return typing.cast(object, state)

    @override
    def save(self, state: SnapshotState) -> None:
        """Write ``state`` under this store's key."""
        data = self._read_all()
        data[self.key] = state

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        logger.debug(f"Saved state to {self.path} (key {self.key!r})")

    def clear(self) -> None:
        """Remove this key's snapshot, deleting the file once it is empty."""
        data = self._read_all()
        if self.key not in data:
            return
        del data[self.key]
        if data:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        else:
            self.path.unlink()
