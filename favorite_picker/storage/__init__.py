"""
Storage implementations.

Provides implementations of the StateStore interface for persisting the
current picker snapshot.

Available implementations:
- NullStore: Persists nothing (no storage key configured)
- MemoryStore: Single-key in-memory string store
- JSONFileStore: Single key inside a JSON file shared by several pickers
- CallableStore: Delegates to user-supplied load/save functions
"""

from .callable_store import CallableStore
from .json_store import JSONFileStore
from .memory_store import MemoryStore, NullStore

__all__ = ["CallableStore", "JSONFileStore", "MemoryStore", "NullStore"]
