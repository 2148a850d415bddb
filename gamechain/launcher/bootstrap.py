"""Launcher bootstrap helpers for config, logging, and supervisor wiring."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable

from gamechain.common.config import Config, ConfigLoader
from gamechain.common.settings import settings
from gamechain.launcher.logs import OutputLogSink
from gamechain.launcher.supervisor import LaunchSupervisor

logger = logging.getLogger(__name__)


def configWithSettings_load(args: argparse.Namespace) -> Config:
    """
    Load application configuration and initialize settings singleton.

    Args:
        args: Parsed launcher CLI args.

    Returns:
        Loaded config.

    Raises:
        FileNotFoundError: If an explicit --config path does not exist.
        ValueError: If the config file is invalid.
    """
    config_path: Path | None = Path(args.config) if getattr(args, "config", None) else None
    config: Config = ConfigLoader.configWithOverrides_load(
        file_path=config_path,
        discovery_timeout=getattr(args, "discovery_timeout", None),
        log_file=getattr(args, "log_file", None),
    )
    settings.initialize(config)
    return config


def loggingWithConfig_setup(
    args: argparse.Namespace,
    config: Config,
    logging_setup_func: Callable[[str, str, str | None], None],
) -> None:
    """
    Setup logging from config and CLI override.

    Args:
        args: Parsed launcher args.
        config: Loaded config.
        logging_setup_func: Logging setup callback.
    """
    log_level: str = getattr(args, "log_level", None) or config.logging.level
    logging_setup_func(log_level, config.logging.format, config.logging.file)


def logSink_create(config: Config) -> OutputLogSink:
    """
    Create the output log sink from configured directories.

    Args:
        config: Loaded config.

    Returns:
        Log sink; unset directories use the per-user defaults.
    """
    runtime_dir = config.launcher.runtime_log_dir
    persistent_dir = config.launcher.persistent_log_dir
    return OutputLogSink(
        runtime_directory=Path(runtime_dir).expanduser() if runtime_dir else None,
        persistent_directory=Path(persistent_dir).expanduser() if persistent_dir else None,
    )


def supervisor_create(config: Config) -> LaunchSupervisor:
    """
    Create a launch supervisor from the application config.

    Args:
        config: Loaded config.

    Returns:
        Supervisor.
    """
    logger.debug(
        "Discovery timeout %.1fs, log failure policy %s",
        config.launcher.discovery_timeout_sec,
        config.launcher.log_failure_policy.value,
    )
    return LaunchSupervisor(
        log_sink=logSink_create(config),
        discovery_timeout_sec=config.launcher.discovery_timeout_sec,
        reap_timeout_sec=config.launcher.compositor_reap_timeout_sec,
        log_failure_policy=config.launcher.log_failure_policy,
    )
