"""gamechain unified command-line interface"""

import argparse
import sys
from typing import NoReturn

from gamechain.common.errors import LaunchError
from gamechain.launcher.launcher_cli import arguments_parse


def main(argv: list[str] | None = None) -> NoReturn:
    """
    Main entry point for the gamechain command

    Args:
        argv: Argument list, None for sys.argv.
    """
    args = arguments_parse(argv)

    log_level_override: str | None = logLevelOverride_get(args)

    try:
        argsWithLogLevel_apply(args, log_level_override)
        subcommand_run(args)
        sys.exit(0)

    except KeyboardInterrupt:
        print("\nShutting down...")
        sys.exit(130)
    except LaunchError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except (OSError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)


def logLevelOverride_get(args: argparse.Namespace) -> str | None:
    """
    Resolve explicit log level override flags.

    Args:
        args: Parsed CLI args.

    Returns:
        Selected log level or None.
    """
    if args.critical:
        return "CRITICAL"
    if args.error:
        return "ERROR"
    if args.warning:
        return "WARNING"
    if args.info:
        return "INFO"
    if args.debug:
        return "DEBUG"
    return None


def argsWithLogLevel_apply(args: argparse.Namespace, log_level: str | None) -> None:
    """
    Apply optional log level override to args.

    Args:
        args: Parsed CLI args.
        log_level: Optional log level string.
    """
    if log_level is not None:
        setattr(args, "log_level", log_level)


def subcommand_run(args: argparse.Namespace) -> None:
    """
    Dispatch the selected subcommand.

    Args:
        args: Parsed CLI args.
    """
    if args.subcommand == "launch":
        from gamechain.launcher.main import launch_run

        launch_run(args)


if __name__ == "__main__":
    main()
