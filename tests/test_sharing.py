"""
Tests for share-code encoding and query-string parsing.
"""

import pytest

from favorite_picker.catalog import ItemCatalog
from favorite_picker.exceptions import ConfigurationError
from favorite_picker.models import Item
from favorite_picker.sharing import (
    build_share_link,
    decode_favorites,
    encode_favorites,
    parse_query_string,
)


@pytest.fixture
def catalog() -> ItemCatalog:
    return ItemCatalog.from_records(
        [
            {"id": "a", "shortcode": "aa"},
            {"id": "b", "shortcode": "bb"},
            {"id": 3, "shortcode": "c3"},
        ],
        shortcode_length=2,
    )


class TestShareCodes:
    """Test encoding and decoding favorites."""

    def test_round_trip(self, catalog: ItemCatalog) -> None:
        """[a, b] encodes to "aabb" and decodes back."""
        # Act
        code = encode_favorites(catalog.resolve(["a", "b"]))

        # Assert
        assert code == "aabb"
        assert decode_favorites(code, catalog, 2) == ["a", "b"]

    def test_decode_skips_unknown_repeated_and_partial(self, catalog: ItemCatalog) -> None:
        assert decode_favorites("c3zzaac3b", catalog, 2) == [3, "a"]

    def test_encode_needs_shortcodes(self) -> None:
        with pytest.raises(ConfigurationError):
            encode_favorites([Item(id="x")])

    def test_decode_needs_positive_length(self, catalog: ItemCatalog) -> None:
        with pytest.raises(ConfigurationError):
            decode_favorites("aa", catalog, 0)

    def test_empty_code(self, catalog: ItemCatalog) -> None:
        assert encode_favorites([]) == ""
        assert decode_favorites("", catalog, 2) == []


class TestQueryStrings:
    """Test building and parsing share links."""

    def test_build_link(self) -> None:
        assert build_share_link("favs", "aabb") == "?favs=aabb"
        assert build_share_link("my favs", "a&b") == "?my%20favs=a%26b"

    def test_parse(self) -> None:
        # Act
        query = parse_query_string("?favs=aabb&flag&&x=1&x=2")

        # Assert
        assert query == {"favs": "aabb", "flag": True, "x": "2"}

    def test_parse_decodes_escapes(self) -> None:
        assert parse_query_string("my%20favs=a%26b") == {"my favs": "a&b"}

    def test_parse_empty(self) -> None:
        assert parse_query_string("") == {}
        assert parse_query_string("?") == {}
