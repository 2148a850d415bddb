"""gamechain launch entry point"""

import argparse
import logging

from gamechain.launcher.bootstrap import (
    configWithSettings_load,
    loggingWithConfig_setup,
    supervisor_create,
)
from gamechain.launcher.launcher_cli import GameArgument
from gamechain.launcher.launcher_logging import logging_setup
from gamechain.launcher.supervisor import LaunchReport

logger = logging.getLogger(__name__)


def launch_run(args: argparse.Namespace) -> LaunchReport:
    """
    Run the `launch` subcommand

    Args:
        args: Parsed CLI args with a resolved `game`

    Returns:
        Report of the finished launch

    Raises:
        LaunchError: If the launch could not be carried out
    """
    config = configWithSettings_load(args)
    loggingWithConfig_setup(args, config, logging_setup)

    game: GameArgument = args.game
    if game.steam_app_id is not None:
        logger.debug("Steam launch for app %d", game.steam_app_id)

    supervisor = supervisor_create(config)
    report = supervisor.launch(
        target_command=game.command,
        launch_identifier=game.launch_identifier,
        want_persistent_log=bool(getattr(args, "persistent_log", False)),
    )

    for log_error in report.log_errors:
        logger.warning("Output log problem: %s", log_error)
    return report
