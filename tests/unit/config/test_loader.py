"""Unit tests for TOML configuration loader."""

import tomllib
from pathlib import Path

import pytest

from pushbot.config.loader import (
    config_files,
    deep_merge,
    get_config_dir,
    get_environment,
    load_config,
)


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_merge_flat_dicts(self) -> None:
        """Flat dictionaries are merged correctly."""
        result = deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_merge_nested_dicts(self) -> None:
        """Nested sections are merged key by key."""
        base = {"scopes": {"backend": "inmemory", "ttl_seconds": 3600}}
        override = {"scopes": {"backend": "redis"}}
        result = deep_merge(base, override)
        assert result == {"scopes": {"backend": "redis", "ttl_seconds": 3600}}

    def test_override_replaces_non_dict(self) -> None:
        """Non-dict values in override replace base values."""
        result = deep_merge({"a": {"x": 1}}, {"a": "replaced"})
        assert result == {"a": "replaced"}

    def test_base_unmodified(self) -> None:
        """Original base dictionary is not modified."""
        base = {"a": 1}
        deep_merge(base, {"b": 2})
        assert base == {"a": 1}


class TestConfigFiles:
    """Tests for config_files function."""

    def test_default_then_environment(self, test_config_dir: Path, mock_toml_files) -> None:
        mock_toml_files({"staging.toml": "", "default.toml": "", "other.toml": ""})

        assert config_files(test_config_dir, "staging") == [
            test_config_dir / "default.toml",
            test_config_dir / "staging.toml",
        ]

    def test_missing_files_skipped(self, test_config_dir: Path, mock_toml_files) -> None:
        mock_toml_files({"staging.toml": ""})

        assert config_files(test_config_dir, "staging") == [test_config_dir / "staging.toml"]

    def test_environment_named_default_read_once(
        self, test_config_dir: Path, mock_toml_files
    ) -> None:
        mock_toml_files({"default.toml": ""})

        assert config_files(test_config_dir, "default") == [test_config_dir / "default.toml"]


class TestGetEnvironment:
    """Tests for get_environment function."""

    def test_returns_env_var_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Returns PUSHBOT_ENV value when set."""
        monkeypatch.setenv("PUSHBOT_ENV", "production")
        assert get_environment() == "production"

    def test_defaults_to_development(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PUSHBOT_ENV", raising=False)
        assert get_environment() == "development"


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_uses_env_var_when_set(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_dir = tmp_path / "custom_config"
        config_dir.mkdir()
        monkeypatch.setenv("PUSHBOT_CONFIG_DIR", str(config_dir))

        assert get_config_dir() == config_dir

    def test_raises_for_missing_env_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PUSHBOT_CONFIG_DIR", str(tmp_path / "missing"))

        with pytest.raises(FileNotFoundError):
            get_config_dir()


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_config(
        self, test_config_dir: Path, mock_toml_files, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        mock_toml_files({"default.toml": "app_name = 'test'\ndebug = false"})
        monkeypatch.setenv("PUSHBOT_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("PUSHBOT_ENV", "nonexistent")

        assert load_config() == {"app_name": "test", "debug": False}

    def test_merges_environment_config(
        self, test_config_dir: Path, mock_toml_files, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Environment config overrides default config."""
        mock_toml_files({
            "default.toml": "[scopes]\nbackend = 'inmemory'\nttl_seconds = 60",
            "production.toml": "[scopes]\nbackend = 'redis'",
        })
        monkeypatch.setenv("PUSHBOT_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("PUSHBOT_ENV", "production")

        assert load_config() == {"scopes": {"backend": "redis", "ttl_seconds": 60}}

    def test_missing_default_yields_empty_config(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without any files the model defaults apply."""
        monkeypatch.setenv("PUSHBOT_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("PUSHBOT_ENV", "nonexistent")

        assert load_config() == {}

    def test_environment_file_without_default(
        self, test_config_dir: Path, mock_toml_files, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        mock_toml_files({"staging.toml": "debug = true"})
        monkeypatch.setenv("PUSHBOT_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("PUSHBOT_ENV", "staging")

        assert load_config() == {"debug": True}

    def test_explicit_directory_and_environment(
        self, test_config_dir: Path, mock_toml_files
    ) -> None:
        """Arguments take precedence over the environment variables."""
        mock_toml_files({
            "default.toml": "[stream]\nconnection_retries = 10",
            "ci.toml": "[stream]\nconnection_retries = 0",
        })

        result = load_config(test_config_dir, "ci")
        assert result == {"stream": {"connection_retries": 0}}

    def test_invalid_toml_raises(self, test_config_dir: Path, mock_toml_files) -> None:
        mock_toml_files({"default.toml": "invalid = [unclosed"})

        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(test_config_dir, "nonexistent")
