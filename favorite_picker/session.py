"""
Session manager for the favorite picker.

Wraps the elimination engine with a bounded undo/redo history, persistence
through a pluggable store, share-code encoding and derived queries.
"""

import copy
import random
import typing
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from loguru import Logger

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from .batch_sizers import CallableBatchSizer
from .catalog import ItemCatalog
from .derivers import CallableSettingsDeriver, DefaultSettingsDeriver
from .engine import EliminationEngine
from .exceptions import ConfigurationError, ValidationError
from .filters import ListFilter, PredicateFilter
from .history import History
from .hooks import CallableLoadHooks, LoadHooks
from .interfaces import BatchSizer, ItemFilter, SettingsDeriver, SnapshotState, StateStore
from .logging_config import get_logger
from .models import Item, ItemId, PickerSnapshot, Settings
from .sharing import build_share_link, decode_favorites, encode_favorites, parse_query_string
from .storage import CallableStore, JSONFileStore, NullStore

DEFAULT_HISTORY_LENGTH = 3
DEFAULT_FAVORITES_QUERY_PARAM = "favs"
DEFAULT_STATE_PATH = Path("picker_state.json")

SNAPSHOT_ADAPTER = TypeAdapter(SnapshotState)


@dataclass
class PickerConfig:
    """Configuration for a picker session."""

    history_length: int = DEFAULT_HISTORY_LENGTH  # undo steps kept
    favorites_query_param: str = DEFAULT_FAVORITES_QUERY_PARAM
    shortcode_length: int | None = None  # fixed share-code width, None disables sharing
    local_storage_key: str | None = None  # persist to a JSON file under this key
    storage_path: Path | None = None  # JSON file for local_storage_key (default: picker_state.json)
    default_settings: Settings = field(default_factory=dict)

    def __post_init__(self):
        """Validate configuration."""
        if self.history_length < 0:
            raise ConfigurationError(f"history_length must be >= 0, got {self.history_length}")
        if not self.favorites_query_param:
            raise ConfigurationError("favorites_query_param cannot be empty")
        if self.shortcode_length is not None and self.shortcode_length <= 0:
            raise ConfigurationError(f"shortcode_length must be positive, got {self.shortcode_length}")
        if not isinstance(self.default_settings, Mapping):
            raise ConfigurationError("default_settings must be a mapping")


class PickerSession:
    """
    One picker run: an engine, its history and its persistence.

    Every mutating action pushes a snapshot onto the history and saves it;
    undo/redo reinstall snapshots from the history and save as well.
    """

    def __init__(
        self,
        items: ItemCatalog | Iterable[Item | Mapping[str, Any]],
        config: PickerConfig | None = None,
        item_filter: ItemFilter | None = None,
        batch_sizer: BatchSizer | None = None,
        store: StateStore | None = None,
        settings_deriver: SettingsDeriver | None = None,
        hooks: LoadHooks | None = None,
        rng: random.Random | None = None,
    ):
        """
        Build the catalog, then resume the persisted state or start a fresh run.

        Args:
            items: An ItemCatalog, or Items/records to build one from
            config: Session configuration (defaults apply when omitted)
            item_filter: Which items take part (default: all)
            batch_sizer: How many items per batch (default: ceil(pool / 5) in [2, 20])
            store: Where snapshots are persisted (default: a JSON file store when
                ``config.local_storage_key`` is set, otherwise nowhere)
            settings_deriver: Settings for seeding from shared favorites
            hooks: Hooks around loading persisted state
            rng: Random source for shuffling (default: process-wide)

        Raises:
            ConfigurationError: If the catalog or configuration is invalid
        """
        self.config: PickerConfig = config or PickerConfig()
        self.catalog: ItemCatalog = self._build_catalog(items)
        self.engine: EliminationEngine = EliminationEngine(
            self.catalog,
            item_filter=item_filter,
            batch_sizer=batch_sizer,
            default_settings=dict(self.config.default_settings),
            rng=rng,
        )
        self.store: StateStore = store or self._default_store()
        self.settings_deriver: SettingsDeriver = settings_deriver or DefaultSettingsDeriver()
        self.hooks: LoadHooks = hooks or LoadHooks()
        self.history: History = History(self.config.history_length)

        # Favorites seeded by the last reset_to_favorites, for is_untouched
        self.initial_favorites = list[ItemId]()

        self.logger: Logger = get_logger("session")

        snapshot = self._load_snapshot()
        if snapshot is not None:
            report = self.engine.restore_state(snapshot)
            self.logger.info(
                f"Resumed saved state: {len(self.engine.favorites)} favorites, {len(self.engine.items)} items"
            )
            self.hooks.on_load_state(report.missing_items, report.extra_items)
        else:
            self.engine.initialize(copy.deepcopy(self.engine.default_settings))
        self._push_history()

    @classmethod
    def from_options(
        cls,
        items: Iterable[Item | Mapping[str, Any]],
        *,
        default_settings: Settings | None = None,
        should_include_item: Callable[[Item, Settings], bool] | None = None,
        get_filtered_items: Callable[[Settings], Iterable[ItemId]] | None = None,
        get_batch_size: Callable[[int, Settings], int] | None = None,
        history_length: int = DEFAULT_HISTORY_LENGTH,
        favorites_query_param: str = DEFAULT_FAVORITES_QUERY_PARAM,
        shortcode_length: int | None = None,
        settings_from_favorites: Callable[[Sequence[Item]], Settings] | None = None,
        modify_state: Callable[[object], object | None] | None = None,
        on_load_state: Callable[[Sequence[ItemId], Sequence[ItemId]], None] | None = None,
        load_state: Callable[[], object | None] | None = None,
        save_state: Callable[[SnapshotState], None] | None = None,
        local_storage_key: str | None = None,
        storage_path: Path | None = None,
        rng: random.Random | None = None,
    ) -> "PickerSession":
        """
        Build a session from plain option values, wiring the strategy objects.

        ``should_include_item`` and ``get_filtered_items`` are mutually
        exclusive. Persistence uses ``load_state``/``save_state`` when given,
        otherwise a JSON file store when ``local_storage_key`` is set,
        otherwise nothing is persisted.

        Raises:
            ConfigurationError: On conflicting options or an invalid catalog
        """
        if should_include_item is not None and get_filtered_items is not None:
            raise ConfigurationError("should_include_item and get_filtered_items are mutually exclusive")

        item_filter: ItemFilter | None = None
        if should_include_item is not None:
            item_filter = PredicateFilter(should_include_item)
        elif get_filtered_items is not None:
            item_filter = ListFilter(get_filtered_items)

        store: StateStore | None = None
        if load_state is not None or save_state is not None:
            store = CallableStore(load_state, save_state)

        config = PickerConfig(
            history_length=history_length,
            favorites_query_param=favorites_query_param,
            shortcode_length=shortcode_length,
            local_storage_key=local_storage_key,
            storage_path=storage_path,
            default_settings=dict(default_settings or {}),
        )
        return cls(
            items,
            config=config,
            item_filter=item_filter,
            batch_sizer=CallableBatchSizer(get_batch_size) if get_batch_size is not None else None,
            store=store,
            settings_deriver=(
                CallableSettingsDeriver(settings_from_favorites)
                if settings_from_favorites is not None
                else None
            ),
            hooks=CallableLoadHooks(modify_state, on_load_state),
            rng=rng,
        )

    # Getters

    def get_evaluating(self) -> list[Item]:
        """Items in the current batch."""
        return self.catalog.resolve(self.engine.evaluating)

    def get_favorites(self) -> list[Item]:
        """Found favorites, oldest first."""
        return self.catalog.resolve(self.engine.favorites)

    def get_settings(self) -> Settings:
        return copy.deepcopy(self.engine.settings)

    def get_state(self) -> PickerSnapshot:
        return self.engine.get_state()

    def has_items(self) -> bool:
        """True if any item passes the current filter."""
        return len(self.engine.items) > 0

    def is_finished(self) -> bool:
        """True once every filtered item has been placed in favorites."""
        return self.engine.is_finished

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def is_untouched(self) -> bool:
        """
        True if no progress has been made beyond the seeded favorites.

        Nothing may be eliminated or survived, and favorites must be empty or
        exactly the favorites seeded by the last reset_to_favorites.
        """
        if self.engine.eliminated or self.engine.survived:
            return False
        if not self.engine.favorites:
            return True
        return self.engine.favorites == self.initial_favorites

    # Actions

    def pick(self, picked: Iterable[Item | ItemId]) -> None:
        """Pick the given items (or ids) from the current batch."""
        picked_ids = [p.id if isinstance(p, Item) else p for p in picked]
        self.engine.pick(picked_ids)
        self._push_history()

    def pass_batch(self) -> None:
        """Pass on the current batch: every item in it survives."""
        self.engine.pass_batch()
        self._push_history()

    def reset(self) -> None:
        """Start over with the current settings."""
        self.engine.reset()
        self.logger.info("Session reset")
        self._push_history()

    def set_settings(self, settings: Settings) -> None:
        report = self.engine.set_settings(settings)
        if report.repaired:
            self.logger.info(
                f"Settings changed: {len(report.missing_items)} items added, {len(report.extra_items)} removed"
            )
        self._push_history()

    def set_favorites(self, favorites: Iterable[ItemId]) -> None:
        self.engine.set_favorites(favorites)
        self._push_history()

    def reset_to_favorites(self, favorites: Iterable[ItemId], settings: Settings | None = None) -> None:
        """
        Start a clean run in which ``favorites`` are already found favorites.

        Without explicit settings, settings are derived from the favorites and
        laid over the defaults. Favorites the effective settings filter out
        (or the catalog does not know) are dropped.
        """
        candidates = [item_id for item_id in dict.fromkeys(favorites) if item_id in self.catalog]

        if settings is None:
            derived = self.settings_deriver.derive(self.catalog.resolve(candidates))
            effective = {**copy.deepcopy(self.engine.default_settings), **copy.deepcopy(derived)}
        else:
            effective = copy.deepcopy(settings)

        seeded = [item_id for item_id in candidates if self.engine.should_include(item_id, effective)]
        if len(seeded) < len(candidates):
            self.logger.info(f"Dropped {len(candidates) - len(seeded)} shared favorites excluded by the settings")

        self.engine.initialize(effective)
        self.engine.set_favorites(seeded)
        self.initial_favorites = list(seeded)
        self.logger.info(f"Reset to {len(seeded)} seeded favorites")
        self._push_history()

    def undo(self) -> bool:
        """Revert to the previous snapshot; returns False at the start of history."""
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.engine.restore_state(snapshot)
        self._save()
        self.logger.debug(f"Undo to history position {self.history.position}")
        return True

    def redo(self) -> bool:
        """Reapply the next snapshot; returns False at the end of history."""
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.engine.restore_state(snapshot)
        self._save()
        self.logger.debug(f"Redo to history position {self.history.position}")
        return True

    # Sharing

    def get_shortcode_string(self) -> str:
        """
        Encode the favorites as concatenated shortcodes.

        Raises:
            ConfigurationError: If no shortcode length is configured
        """
        self._require_shortcodes()
        return encode_favorites(self.get_favorites())

    def get_shortcode_link(self) -> str:
        """Share link for the current favorites, e.g. ``?favs=aabb``."""
        return build_share_link(self.config.favorites_query_param, self.get_shortcode_string())

    def parse_shortcode_string(self, shortcode_string: str) -> list[ItemId]:
        """Decode a shortcode string into ids, skipping unknown and repeated codes."""
        length = self._require_shortcodes()
        return decode_favorites(shortcode_string, self.catalog, length)

    def get_shared_favorites(self, query_string: str | None) -> list[Item] | None:
        """
        Items shared through ``query_string`` (e.g. ``"?favs=aabb"``).

        Returns None when sharing is not configured or the query does not carry
        the favorites parameter.
        """
        if not query_string or self.catalog.shortcode_length is None:
            return None
        value = parse_query_string(query_string).get(self.config.favorites_query_param)
        if value is None:
            return None
        if value is True:
            return []
        return self.catalog.resolve(self.parse_shortcode_string(str(value)))

    # Internal helpers

    def _build_catalog(self, items: ItemCatalog | Iterable[Item | Mapping[str, Any]]) -> ItemCatalog:
        if not isinstance(items, ItemCatalog):
            return ItemCatalog.from_records(items, shortcode_length=self.config.shortcode_length)
        if self.config.shortcode_length is not None and items.shortcode_length != self.config.shortcode_length:
            raise ConfigurationError(
                f"Catalog shortcode_length {items.shortcode_length} does not match configured {self.config.shortcode_length}"
            )
        return items

    def _default_store(self) -> StateStore:
        if self.config.local_storage_key:
            return JSONFileStore(self.config.storage_path or DEFAULT_STATE_PATH, self.config.local_storage_key)
        return NullStore()

    def _require_shortcodes(self) -> int:
        if self.catalog.shortcode_length is None:
            raise ConfigurationError("Sharing requires a shortcode_length")
        return self.catalog.shortcode_length

    def _load_snapshot(self) -> PickerSnapshot | None:
        """Load, adjust and shape-check the persisted state; malformed state is discarded."""
        state = self.store.load()
        if state is not None:
            state = self.hooks.modify_state(state)
        if state is None:
            return None

        try:
            validated = SNAPSHOT_ADAPTER.validate_python(state)
            return PickerSnapshot.from_dict(typing.cast(Mapping[str, Any], validated))
        except (PydanticValidationError, ValidationError) as e:
            self.logger.warning(f"Ignoring invalid saved state: {e}")
            return None

    def _push_history(self) -> None:
        self.history.push(self.engine.get_state())
        self._save()

    def _save(self) -> None:
        state = typing.cast(SnapshotState, self.engine.get_state().to_dict())
        self.store.save(state)
