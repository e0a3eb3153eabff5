"""SQLAlchemy adapter package for catalogseed."""

from __future__ import annotations

from .mappings import (
    category_table,
    mapper_registry,
    product_category_table,
    product_table,
    source_item_table,
    start_mappers,
)
from .repositories import (
    SqlAlchemyCategoryLinker,
    SqlAlchemyEntityStore,
    SqlAlchemyInventoryStore,
)

__all__ = [
    "SqlAlchemyCategoryLinker",
    "SqlAlchemyEntityStore",
    "SqlAlchemyInventoryStore",
    "category_table",
    "mapper_registry",
    "product_category_table",
    "product_table",
    "source_item_table",
    "start_mappers",
]
