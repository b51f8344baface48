"""
Abstract base classes defining the strategy interfaces for the favorite picker.

All interfaces are synchronous; the engine and session call them inline.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from typing_extensions import NotRequired, TypedDict

from .models import Decision, Item, ItemId, Settings

if TYPE_CHECKING:
    from .catalog import ItemCatalog


class EliminatedRecord(TypedDict):
    """TypedDict for one persisted eliminated entry."""
    id: Any
    eliminated_by: NotRequired[list[Any]]


class SnapshotState(TypedDict):
    """
    TypedDict for the persisted snapshot shape.

    Element types are left open: ``validate`` strips anything that is not an
    item id of the filtered catalog, so only the container types are checked.
    """
    eliminated: list[EliminatedRecord | Any]
    survived: list[Any]
    current: list[Any]
    evaluating: list[Any]
    favorites: list[Any]
    settings: NotRequired[dict[str, Any] | None]


class ItemFilter(ABC):
    """Interface for deciding which catalog items take part in a run."""

    @abstractmethod
    def filter_items(self, catalog: "ItemCatalog", settings: Settings) -> list[ItemId]:
        """Return the ids admitted by ``settings``, in catalog order."""
        pass

    @abstractmethod
    def should_include(self, item_id: ItemId, catalog: "ItemCatalog", settings: Settings) -> bool:
        """Return True if ``item_id`` is admitted by ``settings``."""
        pass


class BatchSizer(ABC):
    """Interface for choosing how many items to show at a time."""

    @abstractmethod
    def batch_size(self, pool_size: int, settings: Settings) -> int:
        """
        Target batch size for a round of ``pool_size`` items.

        Args:
            pool_size: Number of unresolved items in the round
            settings: Current (opaque) settings

        Returns:
            Desired number of items per batch
        """
        pass


class SettingsDeriver(ABC):
    """Interface for deriving settings from a shared favorites list."""

    @abstractmethod
    def derive(self, items: Sequence[Item]) -> Settings:
        """Return settings overrides that would admit ``items``."""
        pass


class StateStore(ABC):
    """Interface for persisting the current snapshot."""

    @abstractmethod
    def load(self) -> object | None:
        """
        Load the persisted snapshot.

        The result is untrusted; callers validate its shape before use.
        """
        pass

    @abstractmethod
    def save(self, state: SnapshotState) -> None:
        """Persist ``state``, replacing whatever was stored before."""
        pass


class Chooser(ABC):
    """Interface for deciding which items of a batch to pick."""

    @abstractmethod
    def choose(self, batch: Sequence[Item], settings: Settings) -> Decision:
        """
        Decide on a batch.

        May block (e.g. waiting for user input).

        Args:
            batch: Items currently being evaluated
            settings: Current session settings

        Returns:
            Decision to pick some items, pass, undo, redo or quit
        """
        pass


class CatalogLoader(ABC):
    """Interface for loading an item catalog from an external source."""

    @abstractmethod
    def load(self) -> "ItemCatalog":
        """Load and validate the catalog."""
        pass
