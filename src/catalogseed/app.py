"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalogseed.adapters.sqlalchemy.stores import (
    build_stores,
    category_linker,
    is_started,
    startup,
    uses_thread_local_database,
)
from catalogseed.config import (
    DEFAULT_SEED_SPECS,
    ConfigurationError,
    get_seeding_config,
    load_seed_file,
)
from catalogseed.domain.context import ExecutionContext
from catalogseed.domain.seeding import SeedApplier

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogseed.config import SeedingConfig
    from catalogseed.domain.model import Category, ReconciliationResult, SeedSpec
    from catalogseed.domain.ports import CatalogStores


log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def seed_catalog(
    specs: Sequence[SeedSpec] | None = None,
    *,
    stores: CatalogStores | None = None,
    context: ExecutionContext | None = None,
    config: SeedingConfig | None = None,
) -> list[ReconciliationResult]:
    """Reconcile the catalog with ``specs`` using the configured adapters.

    Without ``specs`` the configured seed file is loaded, falling back to the
    built-in seed. Without ``stores`` the SQLAlchemy stores are used.
    """

    effective_config = config or get_seeding_config()
    if specs is None:
        seed_file = effective_config.seed_file
        specs = load_seed_file(seed_file) if seed_file is not None else DEFAULT_SEED_SPECS
    if stores is None:
        _ensure_started()
        if effective_config.parallel and uses_thread_local_database():
            raise ConfigurationError(
                "Parallel attachments need a shared database; "
                "in-memory SQLite is private to each thread"
            )
        stores = build_stores()
    effective_context = context or ExecutionContext.create(
        area=effective_config.area,
        timeout_seconds=effective_config.timeout_seconds,
    )

    applier = SeedApplier(
        stores,
        category_policy=effective_config.category_policy,
        parallel_attachments=effective_config.parallel,
    )
    log.info(
        "Starting seed run: seeds=%s, area=%s, policy=%s, parallel=%s",
        len(specs),
        effective_context.area,
        effective_config.category_policy,
        effective_config.parallel,
    )

    results = applier.apply_all(specs, context=effective_context)

    for result in results:
        log.info(
            "Seed %s: created=%s, id=%s, warnings=%s",
            result.key,
            result.created,
            result.entity_id,
            len(result.warnings),
        )
        for warning in result.warnings:
            log.warning("Seed %s: %s", result.key, warning)
    return results


def create_category(name: str, *, parent_id: int | None = None) -> Category:
    """Create a catalog category in the configured database."""

    if not name.strip():
        raise ValueError("Category name must not be blank")
    _ensure_started()
    category = category_linker().create(name.strip(), parent_id=parent_id)
    log.info("Created category %s (id=%s)", category.name, category.id)
    return category
