"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ProductType(StrEnum):
    SIMPLE = "simple"
    VIRTUAL = "virtual"


class Visibility(StrEnum):
    NOT_VISIBLE = "not_visible"
    CATALOG = "catalog"
    SEARCH = "search"
    BOTH = "both"


class ProductStatus(StrEnum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class StockStatus(StrEnum):
    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"


class CategoryMatchPolicy(StrEnum):
    """How a category name that matches several categories is assigned."""

    ALL = "all"
    FIRST = "first"
    SKIP = "skip"
