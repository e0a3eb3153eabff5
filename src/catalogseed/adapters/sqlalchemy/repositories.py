"""Catalog stores backed by SQLAlchemy sessions.

Every call runs in its own short-lived session so the three stores behave as
independent systems: a failed stock write never rolls back a product insert.
Each session first caps its lock waits at the time left on the caller's deadline
(SQLite busy timeout, PostgreSQL statement and lock timeouts).
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from catalogseed.adapters.sqlalchemy.mappings import (
    category_table,
    product_category_table,
    product_table,
    source_item_table,
)
from catalogseed.domain.errors import (
    CreationError,
    DuplicateKeyError,
    EntityLookupError,
    InventoryError,
    LinkError,
)
from catalogseed.domain.model import Category, InventorySpec, Product, SourceItem

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping, Sequence

    from sqlalchemy.orm import Session, sessionmaker

    from catalogseed.domain.context import ExecutionContext

log = getLogger(__name__)


# pysqlite's default busy timeout, restored for calls made without a deadline.
_SQLITE_BUSY_TIMEOUT_MS = 5000


def _bound_to_deadline(session: Session, context: ExecutionContext) -> None:
    remaining = context.remaining_seconds
    millis = None if remaining is None else max(int(remaining * 1000), 1)
    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        busy_timeout = _SQLITE_BUSY_TIMEOUT_MS if millis is None else millis
        session.execute(text(f"PRAGMA busy_timeout = {busy_timeout}"))
    elif dialect == "postgresql" and millis is not None:
        session.execute(text(f"SET LOCAL statement_timeout = {millis}"))
        session.execute(text(f"SET LOCAL lock_timeout = {millis}"))


def _product_id(session: Session, sku: str) -> int | None:
    stmt = select(product_table.c.id).where(product_table.c.sku == sku)
    return session.execute(stmt).scalar_one_or_none()


def _folded(name: str) -> str:
    return name.rstrip(" ").casefold()


def _bucket_by_requested_name(
    names: Sequence[str],
    rows: Iterable[tuple[str, int]],
) -> dict[str, tuple[int, ...]]:
    """Group matched ids under the names that were asked for.

    Case-insensitive or pad-space collations return rows whose name differs
    from the requested spelling; such a row counts for every requested name it
    folds to.
    """

    found: dict[str, list[int]] = {name: [] for name in names}
    for row_name, category_id in rows:
        if row_name in found:
            targets = [row_name]
        else:
            targets = [name for name in found if _folded(name) == _folded(row_name)]
        if not targets:
            log.warning("Category %r (id=%s) matches no requested name", row_name, category_id)
        for name in targets:
            found[name].append(category_id)
    return {name: tuple(ids) for name, ids in found.items()}


class SqlAlchemyEntityStore:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def find(self, key: str, *, context: ExecutionContext) -> Product | None:
        context.raise_if_cancelled()
        stmt = select(Product).where(product_table.c.sku == key)
        try:
            with self.session_factory() as session:
                _bound_to_deadline(session, context)
                return session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise EntityLookupError(f"Could not look up product {key!r}: {exc}") from exc

    def create(self, product: Product, *, context: ExecutionContext) -> Product:
        context.raise_if_cancelled()
        log.debug("Inserting product %s (area=%s)", product.sku, context.area)
        try:
            with self.session_factory.begin() as session:
                _bound_to_deadline(session, context)
                session.add(product)
        except IntegrityError as exc:
            if self._exists(product.sku):
                raise DuplicateKeyError(product.sku) from exc
            raise CreationError(f"Product {product.sku!r} rejected: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise CreationError(f"Could not save product {product.sku!r}: {exc}") from exc
        return product

    def _exists(self, sku: str) -> bool:
        try:
            with self.session_factory() as session:
                return _product_id(session, sku) is not None
        except SQLAlchemyError:
            log.exception("Duplicate check for %s failed", sku)
            return False


class SqlAlchemyInventoryStore:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def set_level(
        self,
        key: str,
        inventory: InventorySpec,
        *,
        context: ExecutionContext,
    ) -> None:
        context.raise_if_cancelled()
        stmt = (
            select(SourceItem)
            .where(source_item_table.c.sku == key)
            .where(source_item_table.c.source_code == inventory.source_code)
        )
        try:
            with self.session_factory.begin() as session:
                _bound_to_deadline(session, context)
                if _product_id(session, key) is None:
                    raise InventoryError(f"Unknown product {key!r}")
                item = session.execute(stmt).scalar_one_or_none()
                if item is None:
                    session.add(
                        SourceItem(
                            sku=key,
                            source_code=inventory.source_code,
                            quantity=inventory.quantity,
                            status=inventory.stock_status,
                        )
                    )
                else:
                    item.quantity = inventory.quantity
                    item.status = inventory.stock_status
        except SQLAlchemyError as exc:
            raise InventoryError(f"Could not save stock for {key!r}: {exc}") from exc


class SqlAlchemyCategoryLinker:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def create(self, name: str, *, parent_id: int | None = None) -> Category:
        """Insert a category; names are not unique."""

        category = Category(name=name, parent_id=parent_id)
        try:
            with self.session_factory.begin() as session:
                session.add(category)
        except SQLAlchemyError as exc:
            raise LinkError(f"Could not create category {name!r}: {exc}") from exc
        return category

    def resolve(
        self,
        names: Sequence[str],
        *,
        context: ExecutionContext,
    ) -> Mapping[str, tuple[int, ...]]:
        context.raise_if_cancelled()
        stmt = (
            select(category_table.c.name, category_table.c.id)
            .where(category_table.c.name.in_(list(names)))
            .order_by(category_table.c.id)
        )
        try:
            with self.session_factory() as session:
                _bound_to_deadline(session, context)
                rows = session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise LinkError(f"Could not resolve categories: {exc}") from exc

        return _bucket_by_requested_name(names, rows)

    def assign(
        self,
        key: str,
        category_ids: Collection[int],
        *,
        context: ExecutionContext,
    ) -> None:
        context.raise_if_cancelled()
        wanted = set(category_ids)
        try:
            with self.session_factory.begin() as session:
                _bound_to_deadline(session, context)
                product_id = _product_id(session, key)
                if product_id is None:
                    raise LinkError(f"Unknown product {key!r}")
                self._check_categories(session, wanted)
                current = set(
                    session.execute(
                        select(product_category_table.c.category_id).where(
                            product_category_table.c.product_id == product_id
                        )
                    ).scalars()
                )
                stale = current - wanted
                missing = wanted - current
                if stale:
                    session.execute(
                        delete(product_category_table)
                        .where(product_category_table.c.product_id == product_id)
                        .where(product_category_table.c.category_id.in_(stale))
                    )
                if missing:
                    session.execute(
                        insert(product_category_table),
                        [
                            {"product_id": product_id, "category_id": category_id}
                            for category_id in sorted(missing)
                        ],
                    )
        except SQLAlchemyError as exc:
            raise LinkError(f"Could not assign categories to {key!r}: {exc}") from exc
        log.debug("Linked %s to %s (area=%s)", key, sorted(wanted), context.area)

    def _check_categories(self, session: Session, wanted: set[int]) -> None:
        if not wanted:
            return
        existing = set(
            session.execute(
                select(category_table.c.id).where(category_table.c.id.in_(wanted))
            ).scalars()
        )
        unknown = sorted(wanted - existing)
        if unknown:
            raise LinkError(f"Unknown category ids: {unknown}")
