"""Unit tests for launcher bootstrap, logging setup and the launch entry point"""

from __future__ import annotations

import logging
from argparse import Namespace
from pathlib import Path

import pytest

from gamechain.common.config import Config, LauncherConfig, LoggingConfig
from gamechain.common.settings import settings
from gamechain.common.types import LogFailurePolicy
from gamechain.launcher import main as launcher_main
from gamechain.launcher.bootstrap import (
    configWithSettings_load,
    logSink_create,
    loggingWithConfig_setup,
    supervisor_create,
)
from gamechain.launcher.launcher_cli import GameArgument
from gamechain.launcher.launcher_logging import (
    debugEnv_isEnabled,
    logFormatWithVersion_get,
    logging_setup,
)


def _config_file(tmp_path: Path) -> Path:
    config_file = tmp_path / "config.yml"
    config_file.write_text(
        f"""
logging:
  level: WARNING
launcher:
  discovery_timeout_sec: 7
  runtime_log_dir: {tmp_path / "run"}
  persistent_log_dir: {tmp_path / "keep"}
  log_failure_policy: fail
"""
    )
    return config_file


class TestBootstrap:
    """Test config, logging and supervisor wiring"""

    def test_config_loaded_into_settings(self, tmp_path, reset_settings):
        args = Namespace(config=str(_config_file(tmp_path)), discovery_timeout=2.0, log_file=None)

        config = configWithSettings_load(args)

        assert settings.config is config
        assert config.launcher.discovery_timeout_sec == 2.0
        assert config.launcher.log_failure_policy is LogFailurePolicy.FAIL

    def test_cli_level_overrides_config(self):
        calls = []
        config = Config(logging=LoggingConfig(level="WARNING"))

        loggingWithConfig_setup(
            Namespace(log_level="DEBUG"), config, lambda *args: calls.append(args)
        )
        loggingWithConfig_setup(Namespace(), config, lambda *args: calls.append(args))

        assert [call[0] for call in calls] == ["DEBUG", "WARNING"]

    def test_log_sink_directories_from_config(self, tmp_path):
        config = Config(
            launcher=LauncherConfig(
                runtime_log_dir=str(tmp_path / "run"), persistent_log_dir=str(tmp_path / "keep")
            )
        )

        sink = logSink_create(config)

        assert sink._runtime_directory == tmp_path / "run"
        assert sink._persistent_directory == tmp_path / "keep"

    def test_supervisor_tunables_from_config(self):
        config = Config(
            launcher=LauncherConfig(
                discovery_timeout_sec=1.5,
                compositor_reap_timeout_sec=4.0,
                log_failure_policy=LogFailurePolicy.FAIL,
            )
        )

        supervisor = supervisor_create(config)

        assert supervisor._discovery_timeout_sec == 1.5
        assert supervisor._reap_timeout_sec == 4.0
        assert supervisor._log_failure_policy is LogFailurePolicy.FAIL


class TestLauncherLogging:
    """Test logging helpers"""

    def test_version_tag_injected(self):
        log_format = logFormatWithVersion_get("%(asctime)s %(message)s")
        assert log_format.startswith("%(asctime)s [v")

    @pytest.mark.parametrize("value, enabled", [("1", True), ("0", False), ("yes", False)])
    def test_debug_env(self, monkeypatch, value, enabled):
        monkeypatch.setenv("GAMECHAIN_DEBUG", value)
        assert debugEnv_isEnabled() is enabled

    def test_debug_env_forces_debug_level(self, monkeypatch):
        captured = {}
        monkeypatch.setenv("GAMECHAIN_DEBUG", "1")
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

        logging_setup("ERROR", "%(message)s", None)

        assert captured["level"] == logging.DEBUG
        assert len(captured["handlers"]) == 1

    def test_log_file_handler(self, monkeypatch, tmp_path):
        captured = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

        logging_setup("info", "%(message)s", str(tmp_path / "gamechain.log"))

        assert captured["level"] == logging.INFO
        assert isinstance(captured["handlers"][1], logging.FileHandler)
        captured["handlers"][1].close()


class TestLaunchRun:
    """Test the launch subcommand end to end without wrappers"""

    def test_launch_run(self, tmp_path, reset_settings, monkeypatch):
        games = tmp_path / "games"
        games.mkdir()
        (games / "620.yml").write_text("gamemode: false\nmangohud: false\ngamescope: false\n")
        monkeypatch.setattr(launcher_main, "logging_setup", lambda *args: None)
        args = Namespace(
            game=GameArgument(command="echo portal >&2; exit 4", launch_identifier="620", steam_app_id=620),
            config=str(_config_file(tmp_path)),
            discovery_timeout=None,
            log_file=None,
            persistent_log=True,
            log_level="DEBUG",
        )

        report = launcher_main.launch_run(args)

        assert report.exit_code == 4
        assert report.command == "echo portal >&2; exit 4"
        assert report.persistent_log.read_text() == "portal\n"
        assert report.runtime_log.is_relative_to(tmp_path / "run")
