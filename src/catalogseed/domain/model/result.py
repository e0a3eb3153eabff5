"""Outcome records returned by the seeding core."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Outcome of reconciling one seed; never persisted."""

    key: str
    created: bool
    entity_id: int
    warnings: tuple[str, ...] = ()

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
