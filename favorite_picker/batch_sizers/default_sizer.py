"""
Batch sizer implementations.

The default shows about a fifth of the round at a time, never fewer than two
items and never more than ``max_batch_size`` (20 unless configured).
"""

import math
from collections.abc import Callable

from typing_extensions import override

from ..interfaces import BatchSizer
from ..models import Settings

DEFAULT_MIN_BATCH_SIZE = 2
DEFAULT_MAX_BATCH_SIZE = 20
POOL_DIVISOR = 5


class DefaultBatchSizer(BatchSizer):
    """Batch size = max(2, min_batch_size, min(max_batch_size, ceil(pool / 5)))."""

    @override
    def batch_size(self, pool_size: int, settings: Settings) -> int:
        min_size = settings.get("min_batch_size") or DEFAULT_MIN_BATCH_SIZE
        max_size = settings.get("max_batch_size") or DEFAULT_MAX_BATCH_SIZE
        target = math.ceil(pool_size / POOL_DIVISOR)
        return max(2, int(min_size), min(int(max_size), target))


class CallableBatchSizer(BatchSizer):
    """Batch sizer backed by a ``get_batch_size(pool_size, settings)`` function."""

    def __init__(self, get_batch_size: Callable[[int, Settings], int]):
        self.get_batch_size = get_batch_size

    @override
    def batch_size(self, pool_size: int, settings: Settings) -> int:
        return int(self.get_batch_size(pool_size, settings))
