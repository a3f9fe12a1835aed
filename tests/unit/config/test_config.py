# pyright: reportAny=false, reportUnknownArgumentType=false
"""Unit tests for configuration loading."""

from pathlib import Path

import pytest
from pyfakefs.fake_filesystem import FakeFilesystem

from reqsmith.config import (
    DEFAULT_CONFIG,
    Config,
    ConfigLoadError,
    LogFormat,
    LogLevel,
    deep_merge,
    parse_env_vars,
    read_toml_file,
    set_nested_key,
)


class TestReadTomlFile:
    def test_parses_valid_toml(self, fs: FakeFilesystem) -> None:
        path = Path("/test/reqsmith.toml")
        fs.create_file(path, contents='[logging]\nlevel = "debug"\n')

        assert read_toml_file(path) == {"logging": {"level": "debug"}}

    def test_raises_file_not_found_for_missing_file(self, fs: FakeFilesystem) -> None:
        with pytest.raises(FileNotFoundError):
            read_toml_file(Path("/test/missing.toml"))

    def test_raises_config_load_error_for_invalid_toml(self, fs: FakeFilesystem) -> None:
        path = Path("/test/invalid.toml")
        fs.create_file(path, contents='[logging\nlevel = "debug"\n')

        with pytest.raises(ConfigLoadError) as exc_info:
            read_toml_file(path)

        assert exc_info.value.path == path
        assert "Failed to parse TOML file" in str(exc_info.value)


class TestDeepMerge:
    def test_nested_dicts_are_merged(self) -> None:
        base = {"logging": {"level": "warning", "format": "json"}}
        override = {"logging": {"level": "debug"}}

        assert deep_merge(base, override) == {
            "logging": {"level": "debug", "format": "json"}
        }

    def test_inputs_are_not_modified(self) -> None:
        base = {"a": {"b": [1]}}
        override = {"a": {"c": 2}}

        merged = deep_merge(base, override)
        merged["a"]["b"].append(2)

        assert base == {"a": {"b": [1]}}
        assert override == {"a": {"c": 2}}

    def test_lists_are_replaced(self) -> None:
        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}


class TestEnvVars:
    def test_nested_keys_are_parsed(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("REQSMITH_LOGGING__LEVEL", "debug")
        clean_env.setenv("REQSMITH_DOCUMENT__CASCADE_DELETES", "true")

        assert parse_env_vars() == {
            "logging": {"level": "debug"},
            "document": {"cascade_deletes": True},
        }

    def test_flat_switches_are_ignored(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("REQSMITH_DEBUG", "1")
        clean_env.setenv("REQSMITH_LOG_LEVEL", "info")

        assert parse_env_vars() == {}

    def test_set_nested_key_creates_intermediate_dicts(self) -> None:
        data: dict[str, object] = {}

        set_nested_key(data, "codec.indent", False)

        assert data == {"codec": {"indent": False}}


class TestConfig:
    def test_defaults(self) -> None:
        config = Config()

        assert config.logging.level is LogLevel.WARNING
        assert config.logging.format is LogFormat.JSON
        assert config.codec.indent is True
        assert config.codec.trailing_newline is True
        assert config.document.cascade_deletes is False

    def test_from_dict_merges_over_defaults(self) -> None:
        config = Config.from_dict({"document": {"cascade_deletes": True}})

        assert config.document.cascade_deletes is True
        assert config.logging.level is LogLevel.WARNING

    def test_from_dict_does_not_modify_defaults(self) -> None:
        _ = Config.from_dict({"logging": {"level": "debug"}})

        assert DEFAULT_CONFIG["logging"]["level"] == "warning"

    def test_unknown_keys_are_ignored(self) -> None:
        config = Config.from_dict({"codec": {"indent": False, "sort_keys": True}, "extra": 1})

        assert config.codec.indent is False

    def test_invalid_value_raises_config_load_error(self) -> None:
        with pytest.raises(ConfigLoadError) as exc_info:
            Config.from_dict({"logging": {"level": "verbose"}}, path=Path("/x.toml"))

        assert exc_info.value.path == Path("/x.toml")

    def test_config_is_frozen(self) -> None:
        config = Config()

        with pytest.raises(ValueError):
            config.document.cascade_deletes = True  # pyright: ignore[reportAttributeAccessIssue]

    def test_from_file(self, fs: FakeFilesystem) -> None:
        path = Path("/project/reqsmith.toml")
        fs.create_file(path, contents="[codec]\nindent = false\n")

        config = Config.from_file(path)

        assert config.codec.indent is False

    def test_load_prefers_environment_over_file(
        self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch
    ) -> None:
        path = Path("/project/reqsmith.toml")
        fs.create_file(path, contents='[logging]\nlevel = "info"\nformat = "text"\n')
        clean_env.setenv("REQSMITH_LOGGING__LEVEL", "error")

        config = Config.load(path)

        assert config.logging.level is LogLevel.ERROR
        assert config.logging.format is LogFormat.TEXT

    def test_load_skips_missing_file(
        self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch
    ) -> None:
        config = Config.load(Path("/project/missing.toml"))

        assert config == Config()

    def test_load_without_environment(
        self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch
    ) -> None:
        clean_env.setenv("REQSMITH_DOCUMENT__CASCADE_DELETES", "true")

        config = Config.load(include_env=False)

        assert config.document.cascade_deletes is False
