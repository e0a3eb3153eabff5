"""Public domain model surface."""

from __future__ import annotations

from catalogseed.domain.model.catalog import AttributeValue, Category, Product, SourceItem
from catalogseed.domain.model.entity import Entity
from catalogseed.domain.model.enums import (
    CategoryMatchPolicy,
    ProductStatus,
    ProductType,
    StockStatus,
    Visibility,
)
from catalogseed.domain.model.result import ReconciliationResult
from catalogseed.domain.model.seed import DEFAULT_SOURCE_CODE, InventorySpec, SeedSpec

__all__ = [
    "DEFAULT_SOURCE_CODE",
    "AttributeValue",
    "Category",
    "CategoryMatchPolicy",
    "Entity",
    "InventorySpec",
    "Product",
    "ProductStatus",
    "ProductType",
    "ReconciliationResult",
    "SeedSpec",
    "SourceItem",
    "StockStatus",
    "Visibility",
]
