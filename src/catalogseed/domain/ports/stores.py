"""Bundle of the stores a seed run needs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogseed.domain.ports.persistence import CategoryLinker, EntityStore, InventoryStore


@dataclass(frozen=True, slots=True)
class CatalogStores:
    """Stores managed together; each is an independent system."""

    entities: EntityStore
    inventory: InventoryStore
    categories: CategoryLinker
