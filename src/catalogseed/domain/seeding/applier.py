"""Idempotent seed applier.

The only state that decides what happens is whether the product exists. If it
does, the run is a no-op. If it does not, the product is created and its
dependents (stock level, category links) are attached best-effort: failures
there become warnings on the result and never undo the product write.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalogseed.domain.context import ExecutionContext
from catalogseed.domain.errors import (
    CreationError,
    DuplicateKeyError,
    InventoryError,
    LinkError,
    SeedCancelledError,
)
from catalogseed.domain.model import CategoryMatchPolicy, ReconciliationResult
from catalogseed.domain.seeding.builder import build_product
from catalogseed.domain.seeding.categories import select_categories

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogseed.domain.model import Product, SeedSpec
    from catalogseed.domain.ports import CatalogStores

log = getLogger(__name__)


def _entity_id(product: Product) -> int:
    if product.id is None:
        raise CreationError(f"Store returned product {product.sku!r} without an id")
    return product.id


@dataclass(slots=True)
class SeedApplier:
    """Reconcile catalog stores with seed specs."""

    stores: CatalogStores
    category_policy: CategoryMatchPolicy = CategoryMatchPolicy.ALL
    parallel_attachments: bool = False

    def apply(
        self,
        spec: SeedSpec,
        *,
        context: ExecutionContext | None = None,
    ) -> ReconciliationResult:
        """Ensure the product described by ``spec`` exists and is provisioned.

        Raises ``EntityLookupError`` or ``CreationError`` on fatal failures and
        ``SeedCancelledError`` when ``context`` is cancelled.
        """

        ctx = context or ExecutionContext()
        ctx.raise_if_cancelled()

        existing = self.stores.entities.find(spec.key, context=ctx)
        if existing is not None:
            entity_id = _entity_id(existing)
            log.info("Product %s already exists (id=%s), nothing to do", spec.key, entity_id)
            return ReconciliationResult(key=spec.key, created=False, entity_id=entity_id)

        product = build_product(spec)
        ctx.raise_if_cancelled()
        try:
            created = self.stores.entities.create(product, context=ctx)
        except DuplicateKeyError:
            return self._lost_race(spec, ctx)
        entity_id = _entity_id(created)
        log.info("Created product %s (id=%s) in area %s", spec.key, entity_id, ctx.area)

        try:
            warnings = self._attach_dependents(spec, ctx)
        except SeedCancelledError as exc:
            if exc.entity_id is None:
                raise SeedCancelledError(str(exc), entity_id=entity_id) from exc
            raise

        return ReconciliationResult(
            key=spec.key,
            created=True,
            entity_id=entity_id,
            warnings=tuple(warnings),
        )

    def apply_all(
        self,
        specs: Iterable[SeedSpec],
        *,
        context: ExecutionContext | None = None,
    ) -> list[ReconciliationResult]:
        """Apply ``specs`` in order; a fatal error aborts the remaining ones."""

        ctx = context or ExecutionContext()
        return [self.apply(spec, context=ctx) for spec in specs]

    def _lost_race(self, spec: SeedSpec, ctx: ExecutionContext) -> ReconciliationResult:
        winner = self.stores.entities.find(spec.key, context=ctx)
        if winner is None:
            raise CreationError(
                f"Product {spec.key!r} reported as duplicate but could not be found"
            )
        entity_id = _entity_id(winner)
        log.info("Product %s was created concurrently (id=%s)", spec.key, entity_id)
        return ReconciliationResult(key=spec.key, created=False, entity_id=entity_id)

    def _attach_dependents(self, spec: SeedSpec, ctx: ExecutionContext) -> list[str]:
        ctx.raise_if_cancelled()
        if not self.parallel_attachments:
            warnings = self._attach_inventory(spec, ctx)
            ctx.raise_if_cancelled()
            warnings.extend(self._attach_categories(spec, ctx))
            return warnings

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="seed-attach") as pool:
            inventory = pool.submit(self._attach_inventory, spec, ctx)
            categories = pool.submit(self._attach_categories, spec, ctx)
            return [*inventory.result(), *categories.result()]

    def _attach_inventory(self, spec: SeedSpec, ctx: ExecutionContext) -> list[str]:
        try:
            self.stores.inventory.set_level(spec.key, spec.inventory, context=ctx)
        except InventoryError as exc:
            log.warning("Inventory for %s not saved: %s", spec.key, exc)
            return [f"inventory not saved for {spec.key}: {exc}"]
        log.debug(
            "Set %s stock at %s to %s",
            spec.key,
            spec.inventory.source_code,
            spec.inventory.quantity,
        )
        return []

    def _attach_categories(self, spec: SeedSpec, ctx: ExecutionContext) -> list[str]:
        if not spec.category_names:
            return []

        warnings: list[str] = []
        try:
            resolved = self.stores.categories.resolve(spec.category_names, context=ctx)
            selection = select_categories(
                spec.category_names,
                resolved,
                policy=self.category_policy,
            )
            for warning in selection.warnings:
                log.warning("%s (product %s)", warning, spec.key)
            warnings.extend(selection.warnings)
            if selection.category_ids:
                ctx.raise_if_cancelled()
                self.stores.categories.assign(spec.key, selection.category_ids, context=ctx)
                log.debug("Assigned %s to categories %s", spec.key, selection.category_ids)
        except LinkError as exc:
            log.warning("Categories for %s not assigned: %s", spec.key, exc)
            warnings.append(f"categories not assigned for {spec.key}: {exc}")
        return warnings
