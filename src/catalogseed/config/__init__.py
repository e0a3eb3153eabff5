"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError, SeedFileError
from .logging import configure_logging
from .seed_file import DEFAULT_SEED_SPECS, load_seed_file, parse_seed_document
from .seeding import SeedingConfig, get_seeding_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_SEED_SPECS",
    "ConfigurationError",
    "DatabaseConfig",
    "SeedFileError",
    "SeedingConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_seeding_config",
    "get_storage_config",
    "load_seed_file",
    "parse_seed_document",
]
