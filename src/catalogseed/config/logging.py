"""Logging setup for the catalogseed command line."""

from __future__ import annotations

import logging

# Libraries that log every statement or migration step at INFO.
_NOISY_LOGGERS = ("alembic", "sqlalchemy.engine")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with a terse CLI format.

    Migration and engine chatter is held at WARNING unless ``level`` asks for
    DEBUG output. Pass ``force=True`` to reconfigure during tests.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
