"""Unit tests for logging utilities."""

import logging
from pathlib import Path

import orjson
import pytest
from pyfakefs.fake_filesystem import FakeFilesystem

from reqsmith.config import LogFormat, LoggingConfig, LogLevel
from reqsmith.utils import create_logger, create_logger_from_config
from reqsmith.utils._logging import _log_level_from_string


class TestLogLevelFromString:
    def test_maps_level_names(self) -> None:
        assert _log_level_from_string("debug") == logging.DEBUG
        assert _log_level_from_string("ERROR") == logging.ERROR

    def test_unknown_level_falls_back_to_info(self) -> None:
        assert _log_level_from_string("chatty") == logging.INFO

    def test_debug_switch_wins(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("REQSMITH_DEBUG", "1")
        clean_env.setenv("REQSMITH_LOG_LEVEL", "error")

        assert _log_level_from_string("warning", respect_env=True) == logging.DEBUG

    def test_log_level_variable_overrides_argument(
        self, clean_env: pytest.MonkeyPatch
    ) -> None:
        clean_env.setenv("REQSMITH_LOG_LEVEL", "error")

        assert _log_level_from_string("debug", respect_env=True) == logging.ERROR

    def test_environment_ignored_unless_requested(
        self, clean_env: pytest.MonkeyPatch
    ) -> None:
        clean_env.setenv("REQSMITH_DEBUG", "1")

        assert _log_level_from_string("error") == logging.ERROR


class TestCreateLogger:
    def test_creates_log_directory_if_missing(
        self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch
    ) -> None:
        log_path = Path("/logs/reqsmith.log")

        _ = create_logger(log_file=str(log_path))

        assert log_path.parent.exists()

    def test_default_format_is_json(
        self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch
    ) -> None:
        logger = create_logger(level="info", log_file="/logs/reqsmith.log")

        logger.info("test_event", key="value")

        entry = orjson.loads(Path("/logs/reqsmith.log").read_text().splitlines()[-1])
        assert entry["event"] == "test_event"
        assert entry["key"] == "value"
        assert entry["level"] == "info"
        assert "timestamp" in entry

    def test_text_format(self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch) -> None:
        logger = create_logger(level="info", log_format="text", log_file="/logs/reqsmith.log")

        logger.info("test_event", key="value")

        content = Path("/logs/reqsmith.log").read_text()
        assert "test_event" in content
        assert "key=value" in content

    def test_default_level_filters_info(
        self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch
    ) -> None:
        logger = create_logger(log_file="/logs/reqsmith.log")

        logger.info("quiet_event")
        logger.warning("loud_event")

        content = Path("/logs/reqsmith.log").read_text()
        assert "quiet_event" not in content
        assert "loud_event" in content

    def test_logs_to_stderr_without_file(
        self, capsys: pytest.CaptureFixture[str], clean_env: pytest.MonkeyPatch
    ) -> None:
        logger = create_logger(level="warning")

        logger.warning("stderr_event")

        assert "stderr_event" in capsys.readouterr().err


class TestCreateLoggerFromConfig:
    def test_uses_config_and_binds_component(
        self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch
    ) -> None:
        config = LoggingConfig(
            level=LogLevel.DEBUG, format=LogFormat.JSON, file="/logs/reqsmith.log"
        )

        logger = create_logger_from_config(config, component="codec")
        logger.debug("configured_event")

        entry = orjson.loads(Path("/logs/reqsmith.log").read_text().splitlines()[-1])
        assert entry["event"] == "configured_event"
        assert entry["component"] == "codec"
