"""Explicit execution context passed to every collaborator call."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

from catalogseed.domain.errors import SeedCancelledError

DEFAULT_AREA = "adminhtml"


class CancellationToken:
    """Thread-safe flag a caller flips to stop a running seed."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True, slots=True)
class ExecutionContext:
    """Scope a seed run executes under.

    ``area`` names the privileged scope writes happen in. ``deadline`` is a
    ``time.monotonic()`` value; passing it is treated like cancellation.
    """

    area: str = DEFAULT_AREA
    deadline: float | None = None
    token: CancellationToken = field(default_factory=CancellationToken)

    @classmethod
    def create(
        cls,
        *,
        area: str = DEFAULT_AREA,
        timeout_seconds: float | None = None,
        token: CancellationToken | None = None,
    ) -> ExecutionContext:
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError("Timeout must be positive")
        deadline = time.monotonic() + timeout_seconds if timeout_seconds is not None else None
        return cls(area=area, deadline=deadline, token=token or CancellationToken())

    @property
    def remaining_seconds(self) -> float | None:
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    @property
    def cancelled(self) -> bool:
        if self.token.cancelled:
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def raise_if_cancelled(self, *, entity_id: int | None = None) -> None:
        if self.token.cancelled:
            raise SeedCancelledError("Seed run cancelled", entity_id=entity_id)
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise SeedCancelledError("Seed run deadline exceeded", entity_id=entity_id)
