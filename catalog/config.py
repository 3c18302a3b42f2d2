# catalog/config.py
"""
Typed view of the environment for the catalog service, so the store, the API
and the CLI never read os.environ directly.
"""
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

DEFAULT_DATA_PATH = "data/products.json"
DEFAULT_PORT = 8080


@dataclass(frozen=True)
class Settings:
    data_path: Path
    host: str
    port: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        data_path=Path(os.getenv("CATALOG_DATA_PATH", DEFAULT_DATA_PATH)),
        host=os.getenv("CATALOG_HOST", "0.0.0.0"),
        port=_int(os.getenv("CATALOG_PORT", str(DEFAULT_PORT)), DEFAULT_PORT),
        log_level=(os.getenv("CATALOG_LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
