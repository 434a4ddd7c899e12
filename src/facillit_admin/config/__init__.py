"""Configuration package for the admin console."""

from facillit_admin.config.app_config import (
    AdminConfig,
    BackendConfig,
    ConfigError,
    GateConfig,
    ServerConfig,
    StorageConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AdminConfig",
    "BackendConfig",
    "ConfigError",
    "GateConfig",
    "ServerConfig",
    "StorageConfig",
    "clear_config_cache",
    "load_app_config",
]
