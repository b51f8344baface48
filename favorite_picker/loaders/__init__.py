"""
Catalog loader implementations.
"""

from .json_loader import JSONCatalogLoader

__all__ = ["JSONCatalogLoader"]
