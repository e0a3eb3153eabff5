from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

import pytest

from catalogseed.domain.context import CancellationToken, ExecutionContext
from catalogseed.domain.errors import (
    CreationError,
    DuplicateKeyError,
    EntityLookupError,
    SeedCancelledError,
)
from catalogseed.domain.model import CategoryMatchPolicy, Product
from catalogseed.domain.seeding import SeedApplier
from tests.helpers.catalog import (
    FakeCatalog,
    InMemoryEntityStore,
    failing_inventory,
    failing_link,
    make_seed_spec,
)

if TYPE_CHECKING:
    from catalogseed.domain.model import InventorySpec


def test_apply_creates_then_is_idempotent(
    fake_catalog: FakeCatalog, context: ExecutionContext
) -> None:
    fake_catalog.categories.add("Men")
    applier = SeedApplier(fake_catalog.stores)
    spec = make_seed_spec()

    first = applier.apply(spec, context=context)
    second = applier.apply(spec, context=context)

    assert first.created is True
    assert first.has_warnings is False
    assert second.created is False
    assert second.warnings == ()
    assert second.entity_id == first.entity_id
    assert fake_catalog.inventory.levels[("2002", "default")] == (150, True)
    assert fake_catalog.categories.links["2002"] == {1}
    assert fake_catalog.entities.calls == ["find:2002", "create:2002", "find:2002"]


def test_existing_product_skips_dependents(fake_catalog: FakeCatalog) -> None:
    fake_catalog.entities.products["2002"] = Product(id=41, sku="2002", name="Seeded earlier")

    result = SeedApplier(fake_catalog.stores).apply(make_seed_spec())

    assert result.created is False
    assert result.entity_id == 41
    assert fake_catalog.inventory.calls == []
    assert fake_catalog.categories.calls == []


def test_inventory_failure_is_reported_as_warning(fake_catalog: FakeCatalog) -> None:
    fake_catalog.categories.add("Men")
    fake_catalog.inventory.fail_with = failing_inventory()

    result = SeedApplier(fake_catalog.stores).apply(make_seed_spec())

    assert result.created is True
    assert result.has_warnings is True
    assert result.warnings == (
        "inventory not saved for 2002: source 'default' is disabled",
    )
    assert "2002" in fake_catalog.entities.products
    assert fake_catalog.categories.links["2002"] == {1}


def test_unknown_category_is_skipped(fake_catalog: FakeCatalog) -> None:
    men = fake_catalog.categories.add("Men")
    spec = make_seed_spec(categories=("Men", "Ghost"))

    result = SeedApplier(fake_catalog.stores).apply(spec)

    assert result.created is True
    assert fake_catalog.categories.assigned == [("2002", (men.id,))]
    assert "category not found: Ghost" in result.warnings


def test_no_resolved_categories_skips_assign(fake_catalog: FakeCatalog) -> None:
    result = SeedApplier(fake_catalog.stores).apply(make_seed_spec(categories=("Ghost",)))

    assert result.warnings == ("category not found: Ghost",)
    assert fake_catalog.categories.calls == ["resolve"]


def test_assign_failure_is_reported_as_warning(fake_catalog: FakeCatalog) -> None:
    fake_catalog.categories.add("Men")
    fake_catalog.categories.fail_assign_with = failing_link()

    result = SeedApplier(fake_catalog.stores).apply(make_seed_spec())

    assert result.created is True
    assert result.warnings == ("categories not assigned for 2002: category index locked",)


def test_warnings_list_inventory_before_categories(fake_catalog: FakeCatalog) -> None:
    fake_catalog.inventory.fail_with = failing_inventory("offline")

    result = SeedApplier(fake_catalog.stores, parallel_attachments=True).apply(
        make_seed_spec(categories=("Ghost",))
    )

    assert result.warnings == (
        "inventory not saved for 2002: offline",
        "category not found: Ghost",
    )


def test_ambiguous_category_follows_policy(fake_catalog: FakeCatalog) -> None:
    first = fake_catalog.categories.add("Men")
    fake_catalog.categories.add("Men")

    result = SeedApplier(
        fake_catalog.stores,
        category_policy=CategoryMatchPolicy.FIRST,
    ).apply(make_seed_spec())

    assert fake_catalog.categories.assigned == [("2002", (first.id,))]
    assert result.warnings == ("category name is ambiguous: Men matches 2 categories",)


def test_parallel_attachments_provision_everything(fake_catalog: FakeCatalog) -> None:
    fake_catalog.categories.add("Men")

    result = SeedApplier(fake_catalog.stores, parallel_attachments=True).apply(make_seed_spec())

    assert result.created is True
    assert result.warnings == ()
    assert fake_catalog.inventory.levels[("2002", "default")] == (150, True)
    assert fake_catalog.categories.links["2002"] == {1}


def test_cancelled_before_start_makes_no_store_calls(fake_catalog: FakeCatalog) -> None:
    token = CancellationToken()
    token.cancel()

    with pytest.raises(SeedCancelledError) as excinfo:
        SeedApplier(fake_catalog.stores).apply(
            make_seed_spec(),
            context=ExecutionContext.create(token=token),
        )

    assert excinfo.value.entity_id is None
    assert fake_catalog.calls == []
    assert fake_catalog.entities.products == {}


def test_cancel_after_creation_keeps_product_and_stops(fake_catalog: FakeCatalog) -> None:
    token = CancellationToken()
    context = ExecutionContext.create(token=token)

    class CancellingInventory:
        calls: list[str] = []  # noqa: RUF012

        def set_level(self, key: str, inventory: InventorySpec, *, context: ExecutionContext) -> None:
            _ = (key, inventory, context)
            token.cancel()

    fake_catalog.inventory = CancellingInventory()  # type: ignore[assignment]

    with pytest.raises(SeedCancelledError) as excinfo:
        SeedApplier(fake_catalog.stores).apply(make_seed_spec(), context=context)

    created = fake_catalog.entities.products["2002"]
    assert excinfo.value.entity_id == created.id
    assert fake_catalog.categories.calls == []


def test_lookup_error_aborts_before_write(fake_catalog: FakeCatalog) -> None:
    class UnreachableStore(InMemoryEntityStore):
        def find(self, key: str, *, context: ExecutionContext) -> Product | None:
            raise EntityLookupError(f"store offline while looking up {key}")

    fake_catalog.entities = UnreachableStore()

    with pytest.raises(EntityLookupError):
        SeedApplier(fake_catalog.stores).apply(make_seed_spec())

    assert fake_catalog.entities.products == {}
    assert fake_catalog.inventory.calls == []


def test_creation_error_propagates(fake_catalog: FakeCatalog) -> None:
    class RejectingStore(InMemoryEntityStore):
        def create(self, product: Product, *, context: ExecutionContext) -> Product:
            raise CreationError(f"validation failed for {product.sku}")

    fake_catalog.entities = RejectingStore()

    with pytest.raises(CreationError, match="validation failed"):
        SeedApplier(fake_catalog.stores).apply(make_seed_spec())

    assert fake_catalog.inventory.calls == []
    assert fake_catalog.categories.calls == []


def test_invalid_attributes_fail_before_create(fake_catalog: FakeCatalog) -> None:
    spec = make_seed_spec(extra={"visibility": "nowhere"})

    with pytest.raises(CreationError):
        SeedApplier(fake_catalog.stores).apply(spec)

    assert fake_catalog.entities.calls == ["find:2002"]


def test_duplicate_without_winner_is_a_creation_error(fake_catalog: FakeCatalog) -> None:
    class PhantomDuplicateStore(InMemoryEntityStore):
        def create(self, product: Product, *, context: ExecutionContext) -> Product:
            raise DuplicateKeyError(product.sku)

    fake_catalog.entities = PhantomDuplicateStore()

    with pytest.raises(CreationError, match="could not be found"):
        SeedApplier(fake_catalog.stores).apply(make_seed_spec())


def test_concurrent_applies_create_exactly_once(fake_catalog: FakeCatalog) -> None:
    barrier = threading.Barrier(2)

    class RacingStore(InMemoryEntityStore):
        def find(self, key: str, *, context: ExecutionContext) -> Product | None:
            found = super().find(key, context=context)
            if len(self.calls) <= 2:
                barrier.wait(timeout=5)
            return found

    fake_catalog.entities = RacingStore()
    fake_catalog.categories.add("Men")
    applier = SeedApplier(fake_catalog.stores)
    spec = make_seed_spec()

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(lambda _: applier.apply(spec), range(2)))

    assert sorted(result.created for result in results) == [False, True]
    assert results[0].entity_id == results[1].entity_id
    assert len(fake_catalog.entities.products) == 1


def test_apply_all_returns_results_in_order(fake_catalog: FakeCatalog) -> None:
    fake_catalog.categories.add("Men")
    specs = [make_seed_spec("A1"), make_seed_spec("A2"), make_seed_spec("A1")]

    results = SeedApplier(fake_catalog.stores).apply_all(specs)

    assert [(result.key, result.created) for result in results] == [
        ("A1", True),
        ("A2", True),
        ("A1", False),
    ]
    assert results[0].entity_id == results[2].entity_id
