"""Ports for the external stores a seed run writes to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence

    from catalogseed.domain.context import ExecutionContext
    from catalogseed.domain.model import InventorySpec, Product


@runtime_checkable
class EntityStore(Protocol):
    """Persistence contract for products.

    ``create`` must be atomic with respect to key uniqueness and raise
    ``DuplicateKeyError`` when another writer got there first.
    """

    def find(self, key: str, *, context: ExecutionContext) -> Product | None: ...

    def create(self, product: Product, *, context: ExecutionContext) -> Product: ...


@runtime_checkable
class InventoryStore(Protocol):
    """Persistence contract for per-source stock levels (idempotent upsert)."""

    def set_level(
        self,
        key: str,
        inventory: InventorySpec,
        *,
        context: ExecutionContext,
    ) -> None: ...


@runtime_checkable
class CategoryLinker(Protocol):
    """Category lookup and product assignment.

    ``resolve`` maps every requested name to the ids of the categories carrying
    it (ascending, empty when none). ``assign`` replaces the product's
    category set with ``category_ids``.
    """

    def resolve(
        self,
        names: Sequence[str],
        *,
        context: ExecutionContext,
    ) -> Mapping[str, tuple[int, ...]]: ...

    def assign(
        self,
        key: str,
        category_ids: Collection[int],
        *,
        context: ExecutionContext,
    ) -> None: ...
