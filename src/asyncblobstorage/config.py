import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from .blob_storage_service import DEFAULT_CONTAINER_NAME

BACKENDS = ("azure", "local")


class ConfigurationError(Exception):
    """Raised when the environment does not describe a usable storage backend."""

    pass


def _parse_port(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        port = int(value.strip())
    except ValueError:
        raise ConfigurationError(f"Invalid port '{value}'")
    if not 0 < port < 65536:
        raise ConfigurationError(f"Port out of range: {port}")
    return port


@dataclass(frozen=True)
class Settings:
    storage_backend: str
    azure_connection_string: str | None
    local_base_path: str
    default_container: str
    log_level: str
    host: str
    port: int


def load_settings() -> Settings:
    """Build settings from environment variables (and a .env file, if present)."""
    load_dotenv()

    backend = os.getenv("BLOB_STORAGE_BACKEND", "local").strip().lower() or "local"
    if backend not in BACKENDS:
        raise ConfigurationError(
            f"Unknown storage backend '{backend}', expected one of {BACKENDS}"
        )

    conn_str = os.getenv("AZURE_CONN_STR") or None
    if backend == "azure" and conn_str is None:
        raise ConfigurationError("AZURE_CONN_STR is required for the azure backend")

    return Settings(
        storage_backend=backend,
        azure_connection_string=conn_str,
        local_base_path=os.getenv("BLOB_STORAGE_LOCAL_PATH", "./data"),
        default_container=os.getenv(
            "BLOB_STORAGE_DEFAULT_CONTAINER", DEFAULT_CONTAINER_NAME
        ),
        log_level=os.getenv("BLOB_STORAGE_LOG_LEVEL", "INFO").upper(),
        host=os.getenv("BLOB_STORAGE_HOST", "127.0.0.1"),
        port=_parse_port(os.getenv("BLOB_STORAGE_PORT"), 8000),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
