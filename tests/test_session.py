"""
Tests for PickerSession.

Focus on history, persistence, load hooks and sharing.
"""

import json
import random
import tempfile
from pathlib import Path

import pytest

from favorite_picker.catalog import ItemCatalog
from favorite_picker.exceptions import ConfigurationError
from favorite_picker.models import EliminatedEntry, Item, PickerSnapshot
from favorite_picker.session import PickerConfig, PickerSession
from favorite_picker.storage import JSONFileStore, MemoryStore, NullStore

RECORDS = [
    {"id": "a", "name": "Alpha", "shortcode": "aa", "group": "x"},
    {"id": "b", "name": "Bravo", "shortcode": "bb", "group": "x"},
    {"id": "c", "name": "Charlie", "shortcode": "cc", "group": "y"},
    {"id": "d", "name": "Delta", "shortcode": "dd", "group": "y"},
    {"id": "e", "name": "Echo", "shortcode": "ee", "group": "y"},
]


def all_placed(state: PickerSnapshot) -> list:
    return sorted(
        list(state.current)
        + list(state.evaluating)
        + list(state.survived)
        + [entry.id for entry in state.eliminated]
        + list(state.favorites)
    )


class TestSessionBasics:
    """Test getters on a fresh session."""

    def test_fresh_session(self) -> None:
        # Arrange / Act
        session = PickerSession(RECORDS, rng=random.Random(1))

        # Assert
        batch = session.get_evaluating()
        assert len(batch) == 2
        assert all(isinstance(item, Item) for item in batch)
        assert session.get_favorites() == []
        assert session.has_items()
        assert not session.is_finished()
        assert session.is_untouched()
        assert not session.can_undo()
        assert not session.can_redo()

    def test_no_items_after_filtering(self) -> None:
        session = PickerSession.from_options(RECORDS, should_include_item=lambda item, settings: False)

        assert not session.has_items()
        assert session.is_finished()

    def test_get_settings_is_a_copy(self) -> None:
        # Arrange
        session = PickerSession(RECORDS, config=PickerConfig(default_settings={"tags": ["x"]}))

        # Act
        session.get_settings()["tags"].append("y")

        # Assert
        assert session.get_settings() == {"tags": ["x"]}

    def test_pick_accepts_items_or_ids(self) -> None:
        # Arrange
        session = PickerSession(RECORDS, rng=random.Random(2))
        first, second = session.get_evaluating()

        # Act
        session.pick([first])

        # Assert
        state = session.get_state()
        assert first.id in state.survived
        assert [entry.id for entry in state.eliminated] == [second.id]
        assert not session.is_untouched()

    def test_reset_starts_over(self) -> None:
        # Arrange
        session = PickerSession(RECORDS, rng=random.Random(3))
        session.pick([session.get_evaluating()[0]])

        # Act
        session.reset()

        # Assert
        assert session.is_untouched()
        assert session.can_undo()


class TestUndoRedo:
    """Test history integration."""

    def test_undo_redo_symmetry(self) -> None:
        """Undo then redo restores the post-action state exactly."""
        # Arrange
        session = PickerSession(RECORDS, rng=random.Random(4))
        before = session.get_state()
        session.pick([session.get_evaluating()[0].id])
        after = session.get_state()

        # Act / Assert
        assert session.undo()
        assert session.get_state() == before
        assert session.redo()
        assert session.get_state() == after

    def test_undo_at_start_and_redo_at_end(self) -> None:
        session = PickerSession(RECORDS, rng=random.Random(5))

        assert session.undo() is False
        assert session.redo() is False

    def test_history_length_bounds_undo(self) -> None:
        # Arrange
        session = PickerSession(RECORDS, config=PickerConfig(history_length=2), rng=random.Random(6))
        for _ in range(5):
            if session.is_finished():
                break
            session.pass_batch()

        # Act
        undos = 0
        while session.undo():
            undos += 1

        # Assert
        assert undos == 2

    def test_new_action_clears_redo(self) -> None:
        # Arrange
        session = PickerSession(RECORDS, rng=random.Random(7))
        session.pass_batch()
        session.undo()

        # Act
        session.pass_batch()

        # Assert
        assert not session.can_redo()

    def test_undo_settings_change(self) -> None:
        # Arrange
        session = PickerSession.from_options(
            RECORDS,
            get_filtered_items=lambda settings: settings.get("ids", ["a", "b", "c", "d", "e"]),
            rng=random.Random(8),
        )

        # Act
        session.set_settings({"ids": ["a", "b"]})
        narrowed = all_placed(session.get_state())
        session.undo()

        # Assert
        assert narrowed == ["a", "b"]
        assert session.get_settings() == {}
        assert all_placed(session.get_state()) == ["a", "b", "c", "d", "e"]

    def test_undo_saves(self) -> None:
        # Arrange
        store = MemoryStore()
        session = PickerSession(RECORDS, store=store, rng=random.Random(9))
        session.pass_batch()

        # Act
        session.undo()

        # Assert
        assert store.save_count == 3
        assert json.loads(store.raw or "{}") == session.get_state().to_dict()


class TestPersistence:
    """Test loading and saving through stores."""

    def test_resume_from_store(self) -> None:
        # Arrange
        store = MemoryStore()
        first = PickerSession(RECORDS, store=store, rng=random.Random(10))
        first.pick([first.get_evaluating()[0]])
        first.pass_batch()

        # Act
        second = PickerSession(RECORDS, store=store, rng=random.Random(11))

        # Assert
        assert second.get_state() == first.get_state()
        assert not second.can_undo()

    def test_malformed_state_starts_fresh(self) -> None:
        """A persisted value with the wrong shape is discarded."""
        # Arrange
        store = MemoryStore(raw=json.dumps({"current": "nope"}))

        # Act
        session = PickerSession(RECORDS, store=store, rng=random.Random(12))

        # Assert
        assert all_placed(session.get_state()) == ["a", "b", "c", "d", "e"]
        assert session.is_untouched()
        assert store.save_count == 1

    def test_unreadable_state_starts_fresh(self) -> None:
        store = MemoryStore(raw="{not json")

        session = PickerSession(RECORDS, store=store, rng=random.Random(13))

        assert all_placed(session.get_state()) == ["a", "b", "c", "d", "e"]

    def test_save_state_callable(self) -> None:
        # Arrange
        saved: list = []

        # Act
        session = PickerSession.from_options(RECORDS, save_state=saved.append, rng=random.Random(14))
        session.pass_batch()

        # Assert
        assert len(saved) == 2
        assert saved[-1] == session.get_state().to_dict()

    def test_json_file_store_by_key(self) -> None:
        """local_storage_key persists into a JSON file shared by key."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            path = Path(temp_dir) / "state.json"
            first = PickerSession.from_options(
                RECORDS, local_storage_key="picker-1", storage_path=path, rng=random.Random(15)
            )
            first.pick([first.get_evaluating()[0]])

            # Act
            second = PickerSession.from_options(
                RECORDS, local_storage_key="picker-1", storage_path=path, rng=random.Random(16)
            )
            other = PickerSession.from_options(
                RECORDS, local_storage_key="picker-2", storage_path=path, rng=random.Random(17)
            )

            # Assert
            assert second.get_state() == first.get_state()
            assert other.is_untouched()
            with open(path, "r", encoding="utf-8") as f:
                assert set(json.load(f)) == {"picker-1", "picker-2"}

    def test_config_storage_key_persists(self) -> None:
        """A PickerConfig with local_storage_key saves to its JSON file without an explicit store."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            config = PickerConfig(local_storage_key="picker", storage_path=Path(temp_dir) / "state.json")
            first = PickerSession(RECORDS, config=config, rng=random.Random(19))
            first.pick([first.get_evaluating()[0].id])

            # Act
            second = PickerSession(RECORDS, config=config, rng=random.Random(20))

            # Assert
            assert isinstance(second.store, JSONFileStore)
            assert second.get_state() == first.get_state()
            assert not second.is_untouched()

    def test_no_storage_key_persists_nothing(self) -> None:
        session = PickerSession(RECORDS, config=PickerConfig(), rng=random.Random(21))

        assert isinstance(session.store, NullStore)


class TestLoadHooks:
    """Test modify_state and on_load_state."""

    def test_non_id_elements_are_stripped(self) -> None:
        """Values that are not item ids are dropped without losing progress."""
        # Arrange
        saved = {
            "eliminated": [{"id": "b", "eliminated_by": ["a", None]}],
            "survived": ["a"],
            "current": ["c", None, ["x"], True],
            "evaluating": ["d", "e"],
            "favorites": [],
        }
        calls: list = []

        # Act
        session = PickerSession.from_options(
            RECORDS,
            load_state=lambda: saved,
            on_load_state=lambda missing, extra: calls.append((list(missing), list(extra))),
        )

        # Assert
        state = session.get_state()
        assert state.eliminated == (EliminatedEntry(id="b", eliminated_by=("a",)),)
        assert state.survived == ("a",)
        assert state.current == ("c",)
        assert state.evaluating == ("d", "e")
        assert calls[0][0] == []
        assert {repr(value) for value in calls[0][1]} == {"None", "['x']", "True"}

    def test_records_without_eliminators_survive(self) -> None:
        # Arrange
        saved = {
            "eliminated": [{"id": "b"}, {"id": "c", "eliminated_by": "a"}, "zz"],
            "survived": ["a"],
            "current": [],
            "evaluating": ["d", "e"],
            "favorites": [],
        }
        calls: list = []

        # Act
        session = PickerSession.from_options(
            RECORDS,
            load_state=lambda: saved,
            on_load_state=lambda missing, extra: calls.append((list(missing), list(extra))),
        )

        # Assert
        state = session.get_state()
        assert state.survived == ("a", "b", "c")
        assert state.eliminated == ()
        assert state.evaluating == ("d", "e")
        assert calls == [([], ["zz"])]

    def test_on_load_state_reports_repairs(self) -> None:
        # Arrange
        saved = {
            "eliminated": [],
            "survived": [],
            "current": ["c", "gone"],
            "evaluating": ["a", "b"],
            "favorites": ["d"],
        }
        calls: list = []

        # Act
        session = PickerSession.from_options(
            RECORDS,
            load_state=lambda: saved,
            on_load_state=lambda missing, extra: calls.append((list(missing), list(extra))),
        )

        # Assert
        assert calls == [(["e"], ["gone"])]
        assert [item.id for item in session.get_favorites()] == ["d"]
        assert all_placed(session.get_state()) == ["a", "b", "c", "d", "e"]

    def test_modify_state_can_migrate(self) -> None:
        # Arrange
        saved = {
            "version": 1,
            "data": {
                "eliminated": [{"id": "b", "eliminated_by": ["a"]}],
                "survived": ["a"],
                "current": ["c", "d", "e"],
                "evaluating": [],
                "favorites": [],
                "settings": None,
            },
        }

        # Act
        session = PickerSession.from_options(
            RECORDS,
            load_state=lambda: saved,
            modify_state=lambda state: state["data"],  # pyright: ignore[reportIndexIssue]
        )

        # Assert
        state = session.get_state()
        assert [entry.id for entry in state.eliminated] == ["b"]
        assert state.eliminated[0].eliminated_by == ("a",)

    def test_modify_state_can_discard(self) -> None:
        # Arrange
        calls: list = []

        # Act
        session = PickerSession.from_options(
            RECORDS,
            load_state=lambda: {"garbage": True},
            modify_state=lambda state: None,
            on_load_state=lambda missing, extra: calls.append(missing),
        )

        # Assert
        assert calls == []
        assert session.is_untouched()


class TestConfiguration:
    """Test construction-time validation."""

    def test_conflicting_filters(self) -> None:
        with pytest.raises(ConfigurationError, match="mutually exclusive"):
            PickerSession.from_options(
                RECORDS,
                should_include_item=lambda item, settings: True,
                get_filtered_items=lambda settings: [],
            )

    def test_duplicate_ids(self) -> None:
        with pytest.raises(ConfigurationError):
            PickerSession([{"id": "a"}, {"id": "a"}])

    def test_catalog_shortcode_length_mismatch(self) -> None:
        catalog = ItemCatalog.from_records(RECORDS, shortcode_length=2)

        with pytest.raises(ConfigurationError):
            PickerSession(catalog, config=PickerConfig(shortcode_length=3))

    def test_invalid_config(self) -> None:
        with pytest.raises(ConfigurationError):
            PickerConfig(history_length=-1)
        with pytest.raises(ConfigurationError):
            PickerConfig(favorites_query_param="")


class TestSharing:
    """Test share codes through the session."""

    def _session(self) -> PickerSession:
        return PickerSession.from_options(RECORDS, shortcode_length=2, rng=random.Random(18))

    def test_shortcode_link(self) -> None:
        # Arrange
        session = self._session()

        # Act
        session.set_favorites(["b", "a"])

        # Assert
        assert session.get_shortcode_string() == "bbaa"
        assert session.get_shortcode_link() == "?favs=bbaa"
        assert session.parse_shortcode_string("bbaa") == ["b", "a"]

    def test_shared_favorites(self) -> None:
        session = self._session()

        assert [item.id for item in session.get_shared_favorites("?favs=aacc") or []] == ["a", "c"]
        assert session.get_shared_favorites("?favs") == []
        assert session.get_shared_favorites("?other=1") is None
        assert session.get_shared_favorites(None) is None

    def test_custom_query_param(self) -> None:
        session = PickerSession.from_options(RECORDS, shortcode_length=2, favorites_query_param="top")
        session.set_favorites(["e"])

        assert session.get_shortcode_link() == "?top=ee"
        assert session.get_shared_favorites("?favs=aa") is None

    def test_sharing_disabled(self) -> None:
        session = PickerSession(RECORDS)

        assert session.get_shared_favorites("?favs=aa") is None
        with pytest.raises(ConfigurationError):
            session.get_shortcode_string()


class TestResetToFavorites:
    """Test seeding a run from a shared list."""

    def test_seeded_favorites(self) -> None:
        # Arrange
        session = PickerSession(RECORDS, rng=random.Random(19))

        # Act
        session.reset_to_favorites(["b", "zz", "a", "b"])

        # Assert
        assert [item.id for item in session.get_favorites()] == ["b", "a"]
        assert session.initial_favorites == ["b", "a"]
        assert session.is_untouched()
        assert all_placed(session.get_state()) == ["a", "b", "c", "d", "e"]

    def test_progress_after_seeding_is_not_untouched(self) -> None:
        # Arrange
        session = PickerSession(RECORDS, rng=random.Random(20))
        session.reset_to_favorites(["b", "a"])

        # Act
        session.pick([session.get_evaluating()[0]])

        # Assert
        assert not session.is_untouched()

    def test_settings_derived_from_favorites(self) -> None:
        # Arrange
        session = PickerSession.from_options(
            RECORDS,
            default_settings={"groups": ["x"]},
            should_include_item=lambda item, settings: item.attributes["group"] in settings["groups"],
            settings_from_favorites=lambda items: {"groups": sorted({item.attributes["group"] for item in items})},
            rng=random.Random(21),
        )

        # Act
        session.reset_to_favorites(["c"])

        # Assert
        assert session.get_settings() == {"groups": ["y"]}
        assert [item.id for item in session.get_favorites()] == ["c"]
        assert all_placed(session.get_state()) == ["c", "d", "e"]

    def test_explicit_settings_filter_favorites(self) -> None:
        # Arrange
        session = PickerSession.from_options(
            RECORDS,
            default_settings={"groups": ["x", "y"]},
            should_include_item=lambda item, settings: item.attributes["group"] in settings["groups"],
            rng=random.Random(22),
        )

        # Act
        session.reset_to_favorites(["a", "c"], settings={"groups": ["x"]})

        # Assert
        assert [item.id for item in session.get_favorites()] == ["a"]
        assert all_placed(session.get_state()) == ["a", "b"]
        assert [item.id for item in session.get_evaluating()] == ["b"]

        # The last item joins the favorites once picked
        session.pick(["b"])
        assert [item.id for item in session.get_favorites()] == ["a", "b"]
        assert session.is_finished()
