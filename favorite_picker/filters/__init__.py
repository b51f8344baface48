"""
Item filter implementations.

Provides implementations of the ItemFilter interface that decide which catalog
items take part in a run.

Available implementations:
- IncludeAllFilter: Every catalog item (default)
- PredicateFilter: Per-item predicate over (item, settings)
- ListFilter: Function returning the admitted ids for given settings
"""

from .include_all_filter import IncludeAllFilter
from .list_filter import ListFilter
from .predicate_filter import PredicateFilter

__all__ = ["IncludeAllFilter", "ListFilter", "PredicateFilter"]
