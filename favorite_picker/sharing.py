"""
Share-code encoding.

A favorites list is shared as the concatenation of each favorite's
fixed-width shortcode, carried in a query parameter such as ``?favs=aabbcc``.
"""

from collections.abc import Sequence
from urllib.parse import quote, unquote

from .catalog import ItemCatalog
from .exceptions import ConfigurationError
from .models import Item, ItemId


def encode_favorites(items: Sequence[Item]) -> str:
    """
    Concatenate the shortcodes of ``items`` in order.

    Raises:
        ConfigurationError: If an item has no shortcode
    """
    codes = list[str]()
    for item in items:
        if not item.shortcode:
            raise ConfigurationError(f"Item {item.id!r} has no shortcode")
        codes.append(item.shortcode)
    return "".join(codes)


def decode_favorites(code_string: str, catalog: ItemCatalog, shortcode_length: int) -> list[ItemId]:
    """
    Split ``code_string`` into fixed-width chunks and map them back to ids.

    Unknown chunks, repeated chunks and a trailing partial chunk are skipped.
    """
    if shortcode_length <= 0:
        raise ConfigurationError(f"shortcode_length must be positive, got {shortcode_length}")

    favorites = list[ItemId]()
    found = set[ItemId]()
    for start in range(0, len(code_string), shortcode_length):
        item_id = catalog.id_for_shortcode(code_string[start : start + shortcode_length])
        if item_id is not None and item_id not in found:
            found.add(item_id)
            favorites.append(item_id)
    return favorites


def build_share_link(param: str, code_string: str) -> str:
    """Return ``?<param>=<code_string>`` with both parts percent-encoded."""
    return f"?{quote(param, safe='')}={quote(code_string, safe='')}"


def parse_query_string(query_string: str) -> dict[str, str | bool]:
    """
    Parse ``a=b&c=d`` into a dict.

    A leading ``?`` is ignored, a key without a value maps to True and empty
    segments are skipped. Later keys override earlier ones.
    """
    query = dict[str, str | bool]()
    for segment in query_string.lstrip("?").split("&"):
        if not segment:
            continue
        key, sep, value = segment.partition("=")
        query[unquote(key)] = unquote(value) if sep and value else True
    return query
