"""
Batch sizer implementations.

Available implementations:
- DefaultBatchSizer: ceil(pool / 5) clamped by min/max batch size settings
- CallableBatchSizer: Delegates to a user-supplied function
"""

from .default_sizer import CallableBatchSizer, DefaultBatchSizer

__all__ = ["CallableBatchSizer", "DefaultBatchSizer"]
