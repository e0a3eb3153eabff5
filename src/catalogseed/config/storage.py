"""Locations of the catalog database and the default seed file."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "catalogseed"
DEFAULT_DB_FILENAME: Final[str] = "catalogseed.db"
DEFAULT_SEED_FILENAME: Final[str] = "seeds.toml"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Data directory holding ``catalogseed.db`` and an optional ``seeds.toml``."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME
    seed_filename: str = DEFAULT_SEED_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def database_path(self, *, ensure: bool = True) -> Path:
        data_dir = self.resolve_data_dir()
        if ensure:
            data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"

    def seed_path(self) -> Path | None:
        """Return the seed file kept in the data directory, if there is one."""

        path = self.resolve_data_dir() / self.seed_filename
        return path if path.is_file() else None


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("CATALOGSEED_DATA_DIR")
    return StorageConfig(data_dir=Path(env_dir) if env_dir else _default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in the data directory."""

    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())
