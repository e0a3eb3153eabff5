"""
Base building block:
store-assigned identity.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False, kw_only=True)
class Entity:
    """Identity is assigned by the owning store when the entity is persisted."""

    id: int | None = None
