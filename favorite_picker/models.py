"""
Core dataclasses for the favorite picker.

Defines Item, EliminatedEntry, PickerSnapshot and Decision models with validation.
"""

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import ValidationError

ItemId = str | int
Settings = dict[str, Any]

CONTAINER_NAMES = ("eliminated", "survived", "current", "evaluating", "favorites")


def is_item_id(value: Any) -> bool:
    """True for strings and integers (but not booleans)."""
    return isinstance(value, (str, int)) and not isinstance(value, bool)


@dataclass
class Item:
    """A catalog entry. Only ``id`` matters to the engine."""

    id: ItemId
    name: str | None = None
    image: str | None = None
    shortcode: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate item data."""
        if self.id is None:
            raise ValidationError("item id cannot be None")
        if not is_item_id(self.id):
            raise ValidationError(f"item id must be a string or integer, got {self.id!r}")

    @property
    def display_name(self) -> str:
        return self.name if self.name else str(self.id)


@dataclass(frozen=True)
class EliminatedEntry:
    """An eliminated id and the ids credited with beating it."""

    id: ItemId
    eliminated_by: tuple[ItemId, ...]

    def without(self, eliminator: ItemId) -> "EliminatedEntry":
        """Return a copy with ``eliminator`` no longer credited."""
        return EliminatedEntry(
            id=self.id,
            eliminated_by=tuple(e for e in self.eliminated_by if e != eliminator),
        )


@dataclass(frozen=True)
class PickerSnapshot:
    """
    Immutable copy of the engine's working state.

    Container tuples and entries are immutable, so snapshots can share them.
    Settings are deep-copied on the way in and out.
    """

    eliminated: tuple[EliminatedEntry, ...] = ()
    survived: tuple[ItemId, ...] = ()
    current: tuple[ItemId, ...] = ()
    evaluating: tuple[ItemId, ...] = ()
    favorites: tuple[ItemId, ...] = ()
    settings: Settings = field(default_factory=dict)

    def copy_settings(self) -> Settings:
        return copy.deepcopy(self.settings)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return {
            "eliminated": [
                {"id": entry.id, "eliminated_by": list(entry.eliminated_by)}
                for entry in self.eliminated
            ],
            "survived": list(self.survived),
            "current": list(self.current),
            "evaluating": list(self.evaluating),
            "favorites": list(self.favorites),
            "settings": self.copy_settings(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PickerSnapshot":
        """
        Build a snapshot from the persisted JSON shape.

        Only the container types are checked. Elements are kept as found, so
        ``validate`` can strip the ones that are not item ids. An eliminated
        record that is not a mapping becomes an entry whose id is the record
        itself; eliminators that are not item ids are dropped.

        Raises:
            ValidationError: If a container is missing or has the wrong type
        """
        for name in CONTAINER_NAMES:
            if not isinstance(data.get(name), list):
                raise ValidationError(f"snapshot field '{name}' must be a list")

        settings = data.get("settings") or {}
        if not isinstance(settings, Mapping):
            raise ValidationError("snapshot field 'settings' must be a mapping")

        eliminated = []
        for record in data["eliminated"]:
            if not isinstance(record, Mapping):
                eliminated.append(EliminatedEntry(id=record, eliminated_by=()))
                continue
            eliminated_by = record.get("eliminated_by")
            if not isinstance(eliminated_by, list):
                eliminated_by = []
            eliminated.append(
                EliminatedEntry(
                    id=record.get("id"),
                    eliminated_by=tuple(dict.fromkeys(e for e in eliminated_by if is_item_id(e))),
                )
            )

        return cls(
            eliminated=tuple(eliminated),
            survived=tuple(data["survived"]),
            current=tuple(data["current"]),
            evaluating=tuple(data["evaluating"]),
            favorites=tuple(data["favorites"]),
            settings=copy.deepcopy(dict(settings)),
        )


@dataclass
class ValidationReport:
    """What ``validate`` had to repair."""

    missing_items: list[ItemId] = field(default_factory=list)
    extra_items: list[Any] = field(default_factory=list)

    @property
    def repaired(self) -> bool:
        return bool(self.missing_items or self.extra_items)


DECISION_ACTIONS = ("pick", "pass", "undo", "redo", "quit")


@dataclass
class Decision:
    """A chooser's answer for one batch."""

    action: str = "pick"
    picked: list[ItemId] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate decision data."""
        if self.action not in DECISION_ACTIONS:
            raise ValidationError(f"unknown decision action: {self.action!r}")
        if self.action == "pick" and not self.picked:
            raise ValidationError("a pick decision needs at least one picked id")
