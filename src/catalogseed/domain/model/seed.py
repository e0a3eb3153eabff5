"""Declarative description of the catalog state a seed run must produce."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING

from catalogseed.domain.model.enums import StockStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogseed.domain.model.catalog import AttributeValue

DEFAULT_SOURCE_CODE = "default"


@dataclass(frozen=True, slots=True, kw_only=True)
class InventorySpec:
    """Desired stock level at a single inventory source."""

    quantity: int
    source_code: str = DEFAULT_SOURCE_CODE
    in_stock: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise TypeError("Inventory quantity must be an integer")
        if self.quantity < 0:
            raise ValueError("Inventory quantity must be non-negative")
        if not self.source_code.strip():
            raise ValueError("Inventory source code must not be blank")

    @property
    def stock_status(self) -> StockStatus:
        return StockStatus.IN_STOCK if self.in_stock else StockStatus.OUT_OF_STOCK


def _ordered_names(names: Iterable[str]) -> tuple[str, ...]:
    ordered: dict[str, None] = {}
    for raw in names:
        name = raw.strip()
        if not name:
            raise ValueError("Category names must not be blank")
        ordered.setdefault(name, None)
    return tuple(ordered)


def _check_attribute_value(name: str, value: object) -> None:
    if isinstance(value, float):
        raise TypeError(f"Attribute {name!r} is a float; use Decimal for exact values")
    if not isinstance(value, str | int | Decimal):
        raise TypeError(f"Attribute {name!r} has unsupported type {type(value).__name__}")


@dataclass(frozen=True, slots=True, kw_only=True)
class SeedSpec:
    """Immutable description of one product and its dependents."""

    key: str
    inventory: InventorySpec
    attributes: Mapping[str, AttributeValue] = field(
        default_factory=lambda: MappingProxyType({})
    )
    category_names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        key = self.key.strip()
        if not key:
            raise ValueError("Seed key must not be empty")
        for name, value in self.attributes.items():
            _check_attribute_value(name, value)
        object.__setattr__(self, "key", key)
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "category_names", _ordered_names(self.category_names))
