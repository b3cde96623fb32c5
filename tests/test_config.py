"""
Tests for configuration models and ConfigManager.
"""

import logging
import os

import pytest
from pydantic import ValidationError

from reposcope.config import (
    CONFIG_ENV_VAR,
    Config,
    ConfigManager,
    SearchSettings,
    validate_name,
)
from reposcope.errors import ConfigError, GroupNotFoundError


class TestValidateName:
    """Test suite for alias and group name validation."""

    @pytest.mark.parametrize("name", ["api", "backend-db", "web_2", "My Repo"])
    def test_accepts_plain_names(self, name):
        assert validate_name(name) == name

    @pytest.mark.parametrize(
        "name", ["", "a/b", "a:b", "a;b", "$(x)", "a|b", "tab\there", "x" * 101]
    )
    def test_rejects_unsafe_names(self, name):
        with pytest.raises(ValueError):
            validate_name(name)


class TestConfigModel:
    """Test suite for the Config model."""

    def test_defaults(self):
        config = Config()

        assert config.repositories == {}
        assert config.groups == {}
        assert config.settings == SearchSettings()
        assert config.settings.file_search_timeout == 10.0
        assert config.settings.content_search_timeout == 15.0
        assert config.settings.fallback_search_timeout == 30.0
        assert config.settings.max_count_per_file == 50
        assert config.settings.basic_display_limit == 20

    def test_paths_are_expanded(self, monkeypatch):
        monkeypatch.setenv("HOME", "/home/dev")
        monkeypatch.setenv("SRC", "/src")

        config = Config(repositories={"a": "~/a", "b": "$SRC/b"})

        assert config.repositories == {"a": "/home/dev/a", "b": "/src/b"}

    def test_relative_paths_become_absolute(self, tmp_path, monkeypatch):
        """Test that relative paths are resolved against the working directory."""
        monkeypatch.chdir(tmp_path)

        config = Config(repositories={"a": "rel", "b": "./x/../y"})

        assert config.repositories == {
            "a": os.path.join(os.getcwd(), "rel"),
            "b": os.path.join(os.getcwd(), "y"),
        }

    def test_group_name_defaults_to_key(self):
        config = Config(
            repositories={"api": "/r/api"},
            groups={"backend": {"repositories": ["api"]}},
        )

        assert config.groups["backend"].name == "backend"

    def test_group_member_must_exist(self):
        with pytest.raises(ValidationError):
            Config(
                repositories={"api": "/r/api"},
                groups={"backend": {"repositories": ["api", "db"]}},
            )

    def test_invalid_alias_rejected(self):
        with pytest.raises(ValidationError):
            Config(repositories={"bad:alias": "/r/x"})

    def test_empty_path_rejected(self):
        with pytest.raises(ValidationError):
            Config(repositories={"api": ""})

    def test_settings_must_be_positive(self):
        with pytest.raises(ValidationError):
            SearchSettings(file_search_timeout=0)


class TestConfigManager:
    """Test suite for ConfigManager."""

    def test_missing_file_gives_empty_config(self, tmp_path):
        manager = ConfigManager(tmp_path / "missing.yml")

        config = manager.load()

        assert config.repositories == {}
        assert manager.get_config() is config

    def test_loads_yaml(self, tmp_path, write_config):
        repo = tmp_path / "api"
        repo.mkdir()
        path = write_config(
            {
                "repositories": {"api": str(repo)},
                "groups": {"backend": {"repositories": ["api"]}},
                "settings": {"max_count_per_file": 10},
            }
        )

        config = ConfigManager(path).load()

        assert config.repositories == {"api": str(repo)}
        assert config.settings.max_count_per_file == 10

    def test_empty_file_gives_empty_config(self, write_config):
        path = write_config(None)

        assert ConfigManager(path).load().repositories == {}

    def test_invalid_yaml_raises_config_error(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("repositories: [unclosed\n")

        with pytest.raises(ConfigError):
            ConfigManager(path).load()

    def test_non_mapping_raises_config_error(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError):
            ConfigManager(path).load()

    def test_validation_failure_raises_config_error(self, write_config):
        path = write_config({"repositories": {"a/b": "/r/x"}})

        with pytest.raises(ConfigError) as exc_info:
            ConfigManager(path).load()

        assert "validation failed" in str(exc_info.value)

    def test_nonexistent_repository_path_only_warns(self, tmp_path, write_config, caplog):
        path = write_config({"repositories": {"gone": str(tmp_path / "gone")}})

        with caplog.at_level(logging.WARNING, logger="reposcope.config"):
            config = ConfigManager(path).load()

        assert "gone" in config.repositories
        assert "does not exist" in caplog.text

    def test_env_var_sets_default_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.yml"))

        assert ConfigManager().config_path == tmp_path / "env.yml"

    def test_group_lookups(self, write_config):
        path = write_config(
            {
                "repositories": {"api": "/r/api", "db": "/r/db", "web": "/r/web"},
                "groups": {
                    "backend": {"repositories": ["api", "db"]},
                    "ui": {"description": "frontends", "repositories": ["web"]},
                },
            }
        )
        manager = ConfigManager(path)

        assert manager.get_group_repositories("backend") == {
            "api": "/r/api",
            "db": "/r/db",
        }
        assert sorted(manager.get_group_names()) == ["backend", "ui"]

    def test_unknown_group_raises(self, write_config):
        manager = ConfigManager(write_config({"repositories": {"api": "/r/api"}}))

        with pytest.raises(GroupNotFoundError) as exc_info:
            manager.get_group_repositories("ghost")

        assert exc_info.value.group_name == "ghost"
