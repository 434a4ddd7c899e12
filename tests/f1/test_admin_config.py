"""Tests for admin configuration (F1).

Tests environment loading, YAML tunables, caching and fail-fast behavior.
"""

import pytest

from facillit_admin.config.app_config import (
    ANON_KEY_ENV,
    URL_ENV,
    AdminConfig,
    BackendConfig,
    ConfigError,
    clear_config_cache,
    load_app_config,
)

ENV = {URL_ENV: "https://proj.supabase.co", ANON_KEY_ENV: "public-anon-key"}


@pytest.fixture(autouse=True)
def fresh_cache():
    """Every test starts and ends without a cached config."""
    clear_config_cache()
    yield
    clear_config_cache()


class TestLoadAppConfig:
    """Tests for load_app_config function."""

    def test_loads_backend_from_environment(self, tmp_path):
        """Endpoint and key come from the environment."""
        config = load_app_config(environ=ENV, config_file=tmp_path / "missing.yaml")
        assert isinstance(config, AdminConfig)
        assert config.backend.url == "https://proj.supabase.co"
        assert config.backend.anon_key == "public-anon-key"

    def test_defaults_without_yaml(self, tmp_path):
        """Missing YAML falls back to defaults."""
        config = load_app_config(environ=ENV, config_file=tmp_path / "missing.yaml")
        assert config.storage.bucket == "theme_images"
        assert config.storage.cover_prefix == "theme_covers"
        assert config.gate.entry_route == "/"
        assert config.server.port == 8000

    def test_yaml_tunables_override_defaults(self, tmp_path):
        """YAML sections set storage, gate and server values."""
        config_file = tmp_path / "admin.yaml"
        config_file.write_text(
            "storage:\n  bucket: covers\n  cover_prefix: capas\n"
            "gate:\n  entry_route: /login\n"
            "server:\n  port: 9001\n",
            encoding="utf-8",
        )
        config = load_app_config(environ=ENV, config_file=config_file)
        assert config.storage.bucket == "covers"
        assert config.storage.cover_prefix == "capas"
        assert config.gate.entry_route == "/login"
        assert config.server.port == 9001

    def test_environment_wins_over_yaml_backend(self, tmp_path):
        """Environment values take precedence over the YAML backend section."""
        config_file = tmp_path / "admin.yaml"
        config_file.write_text(
            "backend:\n  url: https://yaml.example\n  anon_key: yaml-key\n",
            encoding="utf-8",
        )
        config = load_app_config(environ=ENV, config_file=config_file)
        assert config.backend.url == "https://proj.supabase.co"

    def test_missing_values_fail_fast(self, tmp_path):
        """Absent endpoint and key raise ConfigError naming both."""
        with pytest.raises(ConfigError) as exc_info:
            load_app_config(environ={}, config_file=tmp_path / "missing.yaml")
        assert exc_info.value.missing == [URL_ENV, ANON_KEY_ENV]

    def test_blank_key_fails(self, tmp_path):
        """A whitespace-only key counts as missing."""
        with pytest.raises(ConfigError) as exc_info:
            load_app_config(
                environ={URL_ENV: "https://proj.supabase.co", ANON_KEY_ENV: "   "},
                config_file=tmp_path / "missing.yaml",
            )
        assert exc_info.value.missing == [ANON_KEY_ENV]

    def test_config_is_cached(self, tmp_path):
        """Second call returns the cached object."""
        first = load_app_config(environ=ENV, config_file=tmp_path / "missing.yaml")
        second = load_app_config(environ={})
        assert second is first

    def test_force_reload_rereads(self, tmp_path):
        """force_reload ignores the cache."""
        load_app_config(environ=ENV, config_file=tmp_path / "missing.yaml")
        other = {URL_ENV: "https://other.supabase.co", ANON_KEY_ENV: "k2"}
        config = load_app_config(force_reload=True, environ=other, config_file=tmp_path / "x.yaml")
        assert config.backend.url == "https://other.supabase.co"


class TestBackendConfig:
    """Tests for BackendConfig dataclass."""

    def test_masked_key_hides_all_but_tail(self):
        config = BackendConfig(url="https://x", anon_key="abcdefghijkl")
        assert config.masked_key() == "********ijkl"
        assert "abcdefgh" not in config.masked_key()

    def test_masked_key_short(self):
        config = BackendConfig(url="https://x", anon_key="abc")
        assert config.masked_key() == "****"
