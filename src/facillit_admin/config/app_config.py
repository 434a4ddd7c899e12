"""Application configuration loader.

Reads the backend endpoint and public key from the environment and the
optional tunables from data/config/admin_config_v1.yaml.

Usage:
    from facillit_admin.config.app_config import load_app_config

    config = load_app_config()
    config.backend.url
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/admin_config_v1.yaml")

URL_ENV = "SUPABASE_URL"
ANON_KEY_ENV = "SUPABASE_ANON_KEY"

DEFAULT_DENIED_MESSAGE = "Acesso negado. Você não é um administrador."


class ConfigError(Exception):
    """Raised when a required configuration value is missing."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            "Configuração ausente: " + ", ".join(missing)
            + ". Defina as variáveis de ambiente antes de iniciar."
        )


@dataclass
class BackendConfig:
    """Endpoint and public key of the hosted backend."""

    url: str
    anon_key: str

    def masked_key(self) -> str:
        """Return the key with everything but the last four chars hidden."""
        if len(self.anon_key) <= 4:
            return "****"
        return "*" * 8 + self.anon_key[-4:]


@dataclass
class StorageConfig:
    """Object storage layout for theme cover images."""

    bucket: str = "theme_images"
    cover_prefix: str = "theme_covers"


@dataclass
class GateConfig:
    """Where the access gate sends rejected callers."""

    entry_route: str = "/"
    denied_message: str = DEFAULT_DENIED_MESSAGE


@dataclass
class ServerConfig:
    """Bind address for `facillit-admin serve`."""

    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class AdminConfig:
    """Application-wide configuration."""

    backend: BackendConfig
    storage: StorageConfig = field(default_factory=StorageConfig)
    gate: GateConfig = field(default_factory=GateConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


# Module-level cache
_cached_config: AdminConfig | None = None


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read the optional YAML file, returning {} when absent or empty."""
    if not path.exists():
        logger.info("using_default_config")
        return {}

    logger.debug("loading_app_config", source=str(path))
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    return data or {}


def _parse_config(data: dict[str, Any], environ: Mapping[str, str]) -> AdminConfig:
    """Build AdminConfig from YAML data and environment.

    Environment values win over the YAML `backend` section.
    """
    backend_data = data.get("backend", {})
    url = environ.get(URL_ENV) or backend_data.get("url") or ""
    anon_key = environ.get(ANON_KEY_ENV) or backend_data.get("anon_key") or ""

    missing = []
    if not url.strip():
        missing.append(URL_ENV)
    if not anon_key.strip():
        missing.append(ANON_KEY_ENV)
    if missing:
        raise ConfigError(missing)

    storage_data = data.get("storage", {})
    storage = StorageConfig(
        bucket=storage_data.get("bucket", "theme_images"),
        cover_prefix=storage_data.get("cover_prefix", "theme_covers"),
    )

    gate_data = data.get("gate", {})
    gate = GateConfig(
        entry_route=gate_data.get("entry_route", "/"),
        denied_message=gate_data.get("denied_message", DEFAULT_DENIED_MESSAGE),
    )

    server_data = data.get("server", {})
    server = ServerConfig(
        host=server_data.get("host", "127.0.0.1"),
        port=int(server_data.get("port", 8000)),
    )

    return AdminConfig(
        backend=BackendConfig(url=url.strip(), anon_key=anon_key.strip()),
        storage=storage,
        gate=gate,
        server=server,
    )


def load_app_config(
    force_reload: bool = False,
    environ: Mapping[str, str] | None = None,
    config_file: Path | None = None,
) -> AdminConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload.
        environ: Environment mapping (defaults to os.environ).
        config_file: YAML file with optional tunables.

    Returns:
        AdminConfig object with all settings.

    Raises:
        ConfigError: If the endpoint URL or public key is absent.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data = _read_yaml(config_file or CONFIG_FILE)
    _cached_config = _parse_config(data, os.environ if environ is None else environ)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when the environment changes at runtime.
    """
    global _cached_config
    _cached_config = None
