"""
Launcher CLI argument parser construction.

This module owns the argument-parser definition and the classification of
the GAME argument, so runtime code only deals with resolved values.
"""

from __future__ import annotations

import argparse
import re
import shutil
from dataclasses import dataclass
from pathlib import Path

from gamechain import __version__

__all__ = [
    "GameArgument",
    "gameArgument_parse",
    "arguments_parse",
    "parser_create",
    "launchArgs_populate",
    "loggingArgs_populate",
]

_STEAM_LAUNCH_PATTERN = re.compile(r"SteamLaunch AppId=(\d+)")


@dataclass(frozen=True)
class GameArgument:
    """Resolved GAME argument: the command to run and the identifier of its config/logs."""

    command: str
    launch_identifier: str
    steam_app_id: int | None = None


def gameArgument_parse(value: str) -> GameArgument:
    """
    Classify GAME as an executable on $PATH or a Steam launch command.

    Executables are identified by their file name; Steam launch commands
    (`%command%` expansions containing `SteamLaunch AppId=<n>`) by the app id.

    Args:
        value: Raw CLI argument.

    Returns:
        Resolved game argument.

    Raises:
        argparse.ArgumentTypeError: If the value is neither.
    """
    executable_path: str | None = shutil.which(value)
    if executable_path is not None:
        return GameArgument(
            command=executable_path,
            launch_identifier=Path(executable_path).name,
        )

    match = _STEAM_LAUNCH_PATTERN.search(value)
    if match is not None:
        app_id = int(match.group(1))
        return GameArgument(command=value, launch_identifier=str(app_id), steam_app_id=app_id)

    raise argparse.ArgumentTypeError(
        "Provided argument is neither a valid executable or a Steam launch %command%"
    )


def arguments_parse(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse launcher command-line arguments.

    Args:
        argv: Argument list, None for sys.argv.

    Returns:
        Parsed argparse namespace.
    """
    parser: argparse.ArgumentParser = parser_create()
    return parser.parse_args(argv)


def parser_create() -> argparse.ArgumentParser:
    """
    Create fully populated launcher argument parser.

    Returns:
        Configured argument parser.
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="gamechain",
        description="Launch games through gamemode, MangoHud, gamescope and other wrappers",
    )
    parser.add_argument("--version", action="version", version=f"gamechain {__version__}")
    subparsers = parser.add_subparsers(dest="subcommand", required=True)

    launch_parser = subparsers.add_parser(
        "launch", help="Launch a game executable or a Steam %%command%%"
    )
    launchArgs_populate(launch_parser)
    loggingArgs_populate(launch_parser)
    return parser


def launchArgs_populate(parser: argparse.ArgumentParser) -> None:
    """
    Populate launch arguments.

    Args:
        parser: Target argument parser.
    """
    parser.add_argument(
        "game",
        type=gameArgument_parse,
        metavar="GAME",
        help="Executable on $PATH, or a Steam launch command (SteamLaunch AppId=...)",
    )
    parser.add_argument(
        "--persistent-log",
        action="store_true",
        dest="persistent_log",
        help="Keep a copy of the game's stderr log in ~/.local/share/gamechain",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to application config file (default: search standard locations)",
    )
    parser.add_argument(
        "--discovery-timeout",
        type=float,
        default=None,
        dest="discovery_timeout",
        help="Seconds to wait for gamescope's Xwayland display (overrides config)",
    )


def loggingArgs_populate(parser: argparse.ArgumentParser) -> None:
    """
    Populate log-level override arguments.

    Args:
        parser: Target argument parser.
    """
    parser.add_argument(
        "--log-file", type=str, default=None, dest="log_file",
        help="Also write gamechain's own log to this file (overrides config)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging (overrides config)"
    )
    parser.add_argument(
        "--info", action="store_true", help="Enable info logging (overrides config)"
    )
    parser.add_argument(
        "--warning", action="store_true", help="Enable warning logging (overrides config)"
    )
    parser.add_argument(
        "--error", action="store_true", help="Enable error logging (overrides config)"
    )
    parser.add_argument(
        "--critical", action="store_true", help="Enable critical logging (overrides config)"
    )
