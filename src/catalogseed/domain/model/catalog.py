"""Catalog entities: products, categories and per-source stock."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from catalogseed.domain.model.entity import Entity
from catalogseed.domain.model.enums import ProductStatus, ProductType, StockStatus, Visibility

type AttributeValue = str | int | Decimal | bool


@dataclass(eq=False, kw_only=True)
class Product(Entity):
    """A catalog product keyed by SKU.

    Products are built once through the constructor; after the store assigns
    ``id`` nothing in the seeding core mutates them.
    """

    sku: str
    name: str
    price: Decimal = Decimal(0)
    url_key: str | None = None
    type_id: ProductType = ProductType.SIMPLE
    attribute_set: str = "Default"
    visibility: Visibility = Visibility.BOTH
    status: ProductStatus = ProductStatus.ENABLED
    custom_attributes: dict[str, AttributeValue] = field(default_factory=dict[str, "AttributeValue"])


@dataclass(eq=False, kw_only=True)
class Category(Entity):
    name: str
    parent_id: int | None = None


@dataclass(eq=False, kw_only=True)
class SourceItem:
    """Stock level of one SKU at one inventory source."""

    sku: str
    source_code: str
    quantity: int
    status: StockStatus = StockStatus.IN_STOCK
