"""Idempotent seeding of catalog products."""

from __future__ import annotations

from .applier import SeedApplier
from .builder import build_product, slugify
from .categories import CategorySelection, select_categories

__all__ = [
    "CategorySelection",
    "SeedApplier",
    "build_product",
    "select_categories",
    "slugify",
]
