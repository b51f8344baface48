"""
Elimination engine for the favorite picker.

Owns the five working containers (eliminated, survived, current, evaluating,
favorites), advances the tournament one decision at a time, and repairs the
containers whenever externally supplied state is installed.
"""

import copy
import random
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

from .batch_sizers import DefaultBatchSizer
from .catalog import ItemCatalog
from .filters import IncludeAllFilter
from .interfaces import BatchSizer, ItemFilter
from .logging_config import get_logger
from .models import EliminatedEntry, ItemId, PickerSnapshot, Settings, ValidationReport, is_item_id

# Module-level logger
logger = get_logger("engine")

T = TypeVar("T")

MIN_BATCH_SIZE = 2


class EliminationEngine:
    """
    Selection/elimination state machine.

    Every filtered catalog id lives in exactly one container:

    - ``current``: queue of ids still to be shown this round
    - ``evaluating``: the batch on screen
    - ``survived``: ids that won their batch this round
    - ``eliminated``: ids beaten by someone, with the ids that beat them
    - ``favorites``: terminal winners, oldest first

    Single-threaded; callers must not mutate the containers directly.
    """

    def __init__(
        self,
        catalog: ItemCatalog,
        item_filter: ItemFilter | None = None,
        batch_sizer: BatchSizer | None = None,
        default_settings: Settings | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the engine. Call ``initialize`` or ``restore_state`` before use.

        Args:
            catalog: Read-only item catalog
            item_filter: Decides which items take part (default: all)
            batch_sizer: Decides the batch size (default: ceil(pool / 5) in [2, 20])
            default_settings: Settings that restored snapshots are merged over
            rng: Random source for shuffling (default: the process-wide ``random`` module)
        """
        self.catalog: ItemCatalog = catalog
        self.item_filter: ItemFilter = item_filter or IncludeAllFilter()
        self.batch_sizer: BatchSizer = batch_sizer or DefaultBatchSizer()
        self.default_settings: Settings = copy.deepcopy(default_settings or {})
        self._rng: random.Random | None = rng

        self.settings: Settings = {}
        self.items = list[ItemId]()

        self.current = list[ItemId]()
        self.evaluating = list[ItemId]()
        self.survived = list[ItemId]()
        self.eliminated = list[EliminatedEntry]()
        self.favorites = list[ItemId]()
        self.batch_size: int = 0

        # Filled by validate for optional user notification
        self.missing_items = list[ItemId]()
        self.extra_items = list[Any]()

    # Initialization and serialization

    def initialize(self, settings: Settings | None = None) -> None:
        """Start a fresh run with ``settings`` (or the default settings)."""
        self.settings = copy.deepcopy(settings if settings is not None else self.default_settings)
        self.items = self._filtered_ids()

        self.current = list(self.items)
        self.evaluating = []
        self.survived = []
        self.eliminated = []
        self.favorites = []
        self.missing_items = []
        self.extra_items = []

        self.batch_size = self._target_batch_size(len(self.current))
        self._shuffle(self.current)
        self.next_batch()

        logger.info(f"Initialized run with {len(self.items)} items, batch size {self.batch_size}")

    def restore_state(self, snapshot: PickerSnapshot) -> ValidationReport:
        """
        Install a snapshot, then validate and repair it.

        The catalog or filter may have changed since the snapshot was taken, so
        the filter is re-applied before validation.
        """
        self.settings = {**copy.deepcopy(self.default_settings), **snapshot.copy_settings()}
        self.items = self._filtered_ids()

        self.eliminated = list(snapshot.eliminated)
        self.survived = list(snapshot.survived)
        self.current = list(snapshot.current)
        self.evaluating = list(snapshot.evaluating)
        self.favorites = list(snapshot.favorites)
        self.batch_size = len(self.evaluating)

        return self.validate()

    def get_state(self) -> PickerSnapshot:
        """Return an independent snapshot of the working state."""
        return PickerSnapshot(
            eliminated=tuple(self.eliminated),
            survived=tuple(self.survived),
            current=tuple(self.current),
            evaluating=tuple(self.evaluating),
            favorites=tuple(self.favorites),
            settings=copy.deepcopy(self.settings),
        )

    def reset(self) -> None:
        """Restart the run, keeping the current settings."""
        self.initialize(self.settings)

    # Public setters

    def set_settings(self, settings: Settings) -> ValidationReport:
        """Replace the settings and reconcile the containers with the new filter."""
        self.settings = copy.deepcopy(settings)
        self.items = self._filtered_ids()

        report = self.validate()
        self.reset_batch_size()
        return report

    def set_favorites(self, favorites: Iterable[ItemId]) -> ValidationReport:
        """
        Overwrite the favorites list.

        Validation removes the new favorites from the other containers, so the
        list may name ids that are currently anywhere.
        """
        self.favorites = list(favorites)
        return self.validate()

    # Queries

    def should_include(self, item_id: ItemId, settings: Settings | None = None) -> bool:
        """Return True if ``item_id`` passes the filter under ``settings`` (default: current)."""
        return self.item_filter.should_include(
            item_id, self.catalog, self.settings if settings is None else settings
        )

    @property
    def is_finished(self) -> bool:
        """True once there is nothing left to evaluate."""
        return not self.evaluating

    # Main picker logic

    def pick(self, picked: Sequence[ItemId]) -> None:
        """
        Resolve the evaluating batch.

        Picked ids survive; every other evaluated id is eliminated with the
        picked ids credited as its eliminators. Picking nothing (or nothing
        that is actually in the batch) passes: every evaluated id survives.
        """
        batch = set(self.evaluating)
        winners = tuple(dict.fromkeys(item_id for item_id in picked if item_id in batch))
        if picked and not winners:
            logger.debug(f"None of {list(picked)} are in the current batch; treating as a pass")

        for item_id in self.evaluating:
            if not winners or item_id in winners:
                self.survived.append(item_id)
            else:
                self.eliminated.append(EliminatedEntry(id=item_id, eliminated_by=winners))

        logger.debug(f"Picked {list(winners)} from batch {self.evaluating}")
        self.evaluating = []
        self.next_batch()

    def pass_batch(self) -> None:
        """Pass on this batch, equivalent to picking every item."""
        self.pick(list(self.evaluating))

    def next_batch(self) -> None:
        """Draw the next batch, crossing into the next round when ``current`` runs short."""
        if len(self.current) < self.batch_size and self.survived:
            self.next_round()
            return
        self.evaluating = self.current[: self.batch_size]
        del self.current[: self.batch_size]

    def next_round(self) -> None:
        """
        Shuffle the survivors back into ``current`` and draw the next batch.

        A lone survivor with nothing left in ``current`` is the next favorite;
        adding it may release items it eliminated, so this repeats until more
        than one contender remains.
        """
        while True:
            while not self.current and len(self.survived) == 1:
                self._add_to_favorites(self.survived.pop())
            if self.current or self.survived or not self.eliminated:
                break
            # Only reachable from a restored state whose eliminations form a cycle
            logger.warning(
                f"No contenders left but {len(self.eliminated)} items are still eliminated; restoring them"
            )
            self.survived.extend(entry.id for entry in self.eliminated)
            self.eliminated = []

        self._shuffle(self.survived)
        self.current.extend(self.survived)
        self.survived = []

        self.batch_size = self._target_batch_size(len(self.current))
        logger.debug(f"Starting round with {len(self.current)} items, batch size {self.batch_size}")
        self.next_batch()

    def reset_batch_size(self) -> None:
        """
        Recompute the batch size for ``current`` + ``survived`` and redraw the batch.

        The evaluating batch goes back to the front of ``current`` first.
        """
        self.current[:0] = self.evaluating
        self.evaluating = []
        self.batch_size = self._target_batch_size(len(self.current) + len(self.survived))
        self.next_batch()

    # State validation

    def validate(self) -> ValidationReport:
        """
        Reconcile the containers with the filtered catalog.

        Builds new containers from the old ones:

        - ids outside the filtered set, and values that are not ids at all, are
          stripped everywhere
        - duplicates are dropped, keeping the first occurrence in priority order
          favorites, survived, eliminated, current, evaluating (the last copy
          within a container); eliminations credited to a duplicated id are
          reversed since the duplicate may be bogus
        - eliminators that are the entry itself, a favorite, a duplicate or
          outside the filtered set are pruned; entries left without eliminators
          return to ``survived``
        - filtered ids found nowhere are inserted at random positions of ``current``

        Returns:
            ValidationReport listing the re-added and stripped ids
        """
        expected = self._filtered_ids()
        self.items = expected
        expected_set = set(expected)

        seen = set[ItemId]()
        duplicates = set[ItemId]()
        extra = list[Any]()

        def reconcile(values: Sequence[T], key: Callable[[T], ItemId]) -> list[T]:
            kept = list[T]()
            for value in reversed(values):
                item_id = key(value)
                if not is_item_id(item_id) or item_id not in expected_set:
                    extra.append(item_id)
                elif item_id in seen:
                    duplicates.add(item_id)
                else:
                    seen.add(item_id)
                    kept.append(value)
            kept.reverse()
            return kept

        def same(item_id: ItemId) -> ItemId:
            return item_id

        favorites = reconcile(self.favorites, same)
        survived = reconcile(self.survived, same)
        eliminated_entries = reconcile(self.eliminated, lambda entry: entry.id)
        current = reconcile(self.current, same)
        evaluating = reconcile(self.evaluating, same)

        favorite_set = set(favorites)
        eliminated = list[EliminatedEntry]()
        for entry in eliminated_entries:
            eliminated_by = tuple(
                dict.fromkeys(
                    eliminator
                    for eliminator in entry.eliminated_by
                    if eliminator != entry.id
                    and is_item_id(eliminator)
                    and eliminator in expected_set
                    and eliminator not in favorite_set
                    and eliminator not in duplicates
                )
            )
            if not eliminated_by:
                logger.debug(f"Item {entry.id!r} has no remaining eliminators; restoring it")
                survived.append(entry.id)
            elif eliminated_by != entry.eliminated_by:
                eliminated.append(EliminatedEntry(id=entry.id, eliminated_by=eliminated_by))
            else:
                eliminated.append(entry)

        missing = [item_id for item_id in expected if item_id not in seen]
        for item_id in missing:
            current.insert(self._random_index(len(current) + 1), item_id)

        self.favorites = favorites
        self.survived = survived
        self.eliminated = eliminated
        self.current = current
        self.evaluating = evaluating

        self.missing_items = missing
        # Non-id values may be unhashable
        self.extra_items = []
        for value in extra:
            if value not in self.extra_items:
                self.extra_items.append(value)
        if missing:
            logger.info(f"Added {len(missing)} items missing from the state: {missing}")
        if self.extra_items:
            logger.info(f"Removed {len(self.extra_items)} items not in the filtered catalog: {self.extra_items}")
        if duplicates:
            logger.info(f"Removed duplicated items: {sorted(map(str, duplicates))}")

        if not self.current and not self.evaluating and (self.survived or self.eliminated):
            self.next_round()
        elif len(self.evaluating) < MIN_BATCH_SIZE:
            self.reset_batch_size()
        else:
            self.batch_size = len(self.evaluating)

        return ValidationReport(missing_items=list(missing), extra_items=list(self.extra_items))

    # Internal helpers

    def _add_to_favorites(self, item_id: ItemId) -> None:
        """Record a tournament winner and release the items only it was holding back."""
        self.favorites.append(item_id)
        self._release_eliminated_by(item_id)
        logger.info(f"New favorite #{len(self.favorites)}: {item_id!r}")

    def _release_eliminated_by(self, eliminator: ItemId) -> None:
        """Remove ``eliminator`` from every eliminated-by set; emptied entries survive."""
        remaining = list[EliminatedEntry]()
        for entry in self.eliminated:
            if eliminator in entry.eliminated_by:
                entry = entry.without(eliminator)
                if not entry.eliminated_by:
                    self.survived.append(entry.id)
                    continue
            remaining.append(entry)
        self.eliminated = remaining

    def _filtered_ids(self) -> list[ItemId]:
        ids = self.item_filter.filter_items(self.catalog, self.settings)
        return list(dict.fromkeys(item_id for item_id in ids if item_id in self.catalog))

    def _target_batch_size(self, pool_size: int) -> int:
        size = self.batch_sizer.batch_size(pool_size, self.settings)
        if size < MIN_BATCH_SIZE:
            logger.warning(f"Batch sizer returned {size} for a pool of {pool_size}; using {MIN_BATCH_SIZE}")
            return MIN_BATCH_SIZE
        return size

    def _shuffle(self, values: list[ItemId]) -> None:
        if self._rng is not None:
            self._rng.shuffle(values)
        else:
            random.shuffle(values)

    def _random_index(self, upper: int) -> int:
        if self._rng is not None:
            return self._rng.randrange(upper)
        return random.randrange(upper)
