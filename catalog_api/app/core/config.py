"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from environment
variables.  Defaults are provided for all fields so the API can start
without any configuration at all, serving the bundled sample catalog.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Catalog API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = _env_bool("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Path to the JSON file holding the catalog.  A relative path is
    # resolved against the ``catalog_api`` package directory by
    # ``get_data_path``.
    data_path: str = os.getenv("DATA_PATH", "data/items.json")

    # Poll the data file for out-of-band edits.  Watching is always off
    # in the ``test`` environment regardless of this flag.
    watch_file: bool = _env_bool("WATCH_FILE", "true")
    watch_interval: float = float(os.getenv("WATCH_INTERVAL", "5.0"))

    # Upper bound on the number of identifiers accepted by /compare.
    compare_max_ids: int = int(os.getenv("COMPARE_MAX_IDS", "10"))

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    @property
    def watch_enabled(self) -> bool:
        return self.watch_file and self.environment != "test"


def get_data_path(app_settings: Optional[Settings] = None) -> str:
    """Compute the absolute path to the catalog data file.

    If ``data_path`` is absolute it is used directly, otherwise it is
    resolved relative to the package root (``catalog_api/``).
    """
    data_path = (app_settings or settings).data_path
    if os.path.isabs(data_path):
        return data_path
    base_dir = Path(__file__).resolve().parent.parent.parent  # catalog_api/
    return str((base_dir / data_path).resolve())


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must be
# set before this module is imported.
settings = Settings()
