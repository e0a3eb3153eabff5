"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import CategoryLinker, EntityStore, InventoryStore
from .stores import CatalogStores

__all__ = [
    "CatalogStores",
    "CategoryLinker",
    "EntityStore",
    "InventoryStore",
]
