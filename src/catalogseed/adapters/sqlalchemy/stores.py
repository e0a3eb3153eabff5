"""Engine lifecycle and store construction for the SQLAlchemy adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from catalogseed.adapters.sqlalchemy.mappings import start_mappers
from catalogseed.adapters.sqlalchemy.migrations import upgrade_head
from catalogseed.adapters.sqlalchemy.repositories import (
    SqlAlchemyCategoryLinker,
    SqlAlchemyEntityStore,
    SqlAlchemyInventoryStore,
)
from catalogseed.config import get_database_config
from catalogseed.domain.ports import CatalogStores

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when SQLAlchemy stores are requested before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call catalogseed.adapters.sqlalchemy."
                "stores.startup() before requesting stores."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, schema, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri,
        future=True,
    )
    start_mappers()
    upgrade_head(engine=resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


def uses_thread_local_database() -> bool:
    """Whether each thread would see its own private in-memory SQLite database."""

    engine = _STATE.engine
    if engine is None:
        return False
    url = engine.url
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def build_stores() -> CatalogStores:
    """Return the three catalog stores bound to the configured engine."""

    session_factory = _STATE.session_factory
    return CatalogStores(
        entities=SqlAlchemyEntityStore(session_factory),
        inventory=SqlAlchemyInventoryStore(session_factory),
        categories=SqlAlchemyCategoryLinker(session_factory),
    )


def category_linker() -> SqlAlchemyCategoryLinker:
    """Return a category linker for category maintenance commands."""

    return SqlAlchemyCategoryLinker(_STATE.session_factory)
