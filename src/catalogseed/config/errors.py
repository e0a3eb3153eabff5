"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class SeedFileError(ConfigurationError):
    """Raised when a seed file cannot be read or does not describe valid seeds."""
