"""Seeding defaults, overridable through the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from catalogseed.domain.context import DEFAULT_AREA
from catalogseed.domain.model import CategoryMatchPolicy

from .errors import ConfigurationError
from .storage import get_storage_config

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class SeedingConfig:
    area: str = DEFAULT_AREA
    timeout_seconds: float | None = None
    parallel: bool = False
    category_policy: CategoryMatchPolicy = CategoryMatchPolicy.ALL
    seed_file: Path | None = None


def _env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_timeout(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid CATALOGSEED_TIMEOUT_SECONDS: {raw!r}") from exc
    if timeout <= 0:
        raise ConfigurationError("CATALOGSEED_TIMEOUT_SECONDS must be positive")
    return timeout


def _parse_flag(raw: str | None) -> bool:
    if raw is None:
        return False
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid CATALOGSEED_PARALLEL: {raw!r}")


def _parse_policy(raw: str | None) -> CategoryMatchPolicy:
    if raw is None:
        return CategoryMatchPolicy.ALL
    try:
        return CategoryMatchPolicy(raw.lower())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid CATALOGSEED_CATEGORY_POLICY: {raw!r}") from exc


def get_seeding_config() -> SeedingConfig:
    """Read seeding defaults from ``CATALOGSEED_*`` variables.

    Without ``CATALOGSEED_SEED_FILE`` a ``seeds.toml`` in the data directory is
    used when present.
    """

    seed_file = _env("CATALOGSEED_SEED_FILE")
    return SeedingConfig(
        area=_env("CATALOGSEED_AREA") or DEFAULT_AREA,
        timeout_seconds=_parse_timeout(_env("CATALOGSEED_TIMEOUT_SECONDS")),
        parallel=_parse_flag(_env("CATALOGSEED_PARALLEL")),
        category_policy=_parse_policy(_env("CATALOGSEED_CATEGORY_POLICY")),
        seed_file=Path(seed_file).expanduser() if seed_file else get_storage_config().seed_path(),
    )
