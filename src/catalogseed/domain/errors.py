"""Error taxonomy for seed reconciliation.

Fatal errors (``EntityLookupError``, ``CreationError``) abort ``apply`` before or
instead of the product write. ``InventoryError`` and ``LinkError`` are raised by
the stores but downgraded to warnings by the applier. ``SeedCancelledError``
always propagates.
"""

from __future__ import annotations


class SeedError(RuntimeError):
    """Base class for seeding failures."""


class EntityLookupError(SeedError):
    """The existence check could not be answered (store unreachable)."""


class CreationError(SeedError):
    """The entity store rejected the product write; nothing was created."""


class DuplicateKeyError(CreationError):
    """Another writer created the same key first."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Product with key {key!r} already exists")
        self.key = key


class InventoryError(SeedError):
    """Stock level could not be saved."""


class LinkError(SeedError):
    """Categories could not be resolved or assigned."""


class SeedCancelledError(SeedError):
    """The caller cancelled the run or its deadline passed.

    ``entity_id`` is set when the product had already been created.
    """

    def __init__(self, message: str = "Seed run cancelled", *, entity_id: int | None = None) -> None:
        super().__init__(message)
        self.entity_id = entity_id
