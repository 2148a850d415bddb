"""
Launch supervisor.

Owns one launch from configuration to cleanup:

1. resolve the game configuration (defaults when the game has none)
2. assemble the wrapper chain
3. with gamescope's overlay fix on, start gamescope on its own, wait (bounded)
   for it to announce its Xwayland display and point the game at it; if it
   never does, tear it down and run gamescope inline instead
4. run the chain through `sh -c`, stderr captured to the runtime log
5. interrupt and reap gamescope, whatever happened in 4
6. optionally copy the runtime log to persistent storage

Nothing after gamescope starts may skip step 5; it runs in a `finally`.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, IO, Optional

from gamechain.common.config import GameConfig, GameConfigLoader
from gamechain.common.errors import LogStorageError, ProcessSpawnError
from gamechain.common.settings import settings
from gamechain.common.types import (
    DiscoveryOutcome,
    LogFailurePolicy,
    OutputLogKind,
    TerminationOutcome,
    WrapperKind,
)
from gamechain.launcher.command import AssemblyContext, CommandPlan, commandPlan_assemble
from gamechain.launcher.discovery import DisplayDiscoveryTask
from gamechain.launcher.environment import LaunchEnvironment
from gamechain.launcher.logs import OutputLogSink, ProcessOutputLog
from gamechain.launcher.process import CompositorProcess

logger = logging.getLogger(__name__)

__all__ = [
    "LaunchReport",
    "LaunchSupervisor",
    "gameConfig_resolve",
]

ConfigResolver = Callable[[str], GameConfig]


def gameConfig_resolve(launch_identifier: str) -> GameConfig:
    """
    Resolve the configuration of a game, falling back to defaults.

    Args:
        launch_identifier: Game executable name or Steam app id.

    Returns:
        Parsed configuration, or the built-in defaults if the game has no file.

    Raises:
        ConfigError: On permission, encoding or parse problems.
    """
    config_path: Optional[Path] = GameConfigLoader.configFile_find(launch_identifier)
    if config_path is None:
        logger.warning(
            "Game config file with the name `%s` doesn't exist, using the defaults.",
            launch_identifier,
        )
        return GameConfig()
    logger.debug("Using game config %s", config_path)
    return GameConfigLoader.gameConfigFile_load(config_path)


@dataclass
class LaunchReport:
    """What a finished launch did."""

    command: str
    exit_code: Optional[int]
    display_number: Optional[int] = None
    discovery: Optional[DiscoveryOutcome] = None
    teardown: Optional[TerminationOutcome] = None
    runtime_log: Optional[Path] = None
    persistent_log: Optional[Path] = None
    log_errors: list[str] = field(default_factory=list)


class LaunchSupervisor:
    """Runs a game through its wrapper chain and cleans up after it."""

    def __init__(
        self,
        config_resolver: ConfigResolver = gameConfig_resolve,
        assembly_context: Optional[AssemblyContext] = None,
        log_sink: Optional[OutputLogSink] = None,
        discovery_timeout_sec: Optional[float] = settings.DEFAULT_DISCOVERY_TIMEOUT_SEC,
        reap_timeout_sec: Optional[float] = 10.0,
        log_failure_policy: LogFailurePolicy = LogFailurePolicy.REPORT,
    ) -> None:
        """
        Initialize supervisor.

        Args:
            config_resolver: Launch identifier -> game configuration.
            assembly_context: Tool and resolution lookups for the assembler.
            log_sink: Runtime/persistent output log storage.
            discovery_timeout_sec: Bound on waiting for gamescope's display.
            reap_timeout_sec: Bound on waiting for gamescope to exit after SIGINT.
            log_failure_policy: Whether a persistent-log copy failure fails the launch.
        """
        self._config_resolver: ConfigResolver = config_resolver
        self._assembly_context: AssemblyContext = assembly_context or AssemblyContext()
        self._log_sink: OutputLogSink = log_sink or OutputLogSink()
        self._discovery_timeout_sec: Optional[float] = discovery_timeout_sec
        self._reap_timeout_sec: Optional[float] = reap_timeout_sec
        self._log_failure_policy: LogFailurePolicy = log_failure_policy

    def launch(
        self,
        target_command: str,
        launch_identifier: str,
        want_persistent_log: bool = False,
    ) -> LaunchReport:
        """
        Launch a game and supervise it until it exits.

        The game's own exit status is reported, not treated as an error.

        Args:
            target_command: Command that starts the game.
            launch_identifier: Names the game's config file and output logs.
            want_persistent_log: Copy the runtime log to persistent storage.

        Returns:
            Launch report.

        Raises:
            ConfigError: Configuration could not be resolved.
            MissingToolError: An enabled wrapper is not installed.
            ScreenResolutionError: Native resolution unknown.
            ProcessSpawnError: Compositor or launch command failed to start.
            LogStorageError: Persistent copy failed under LogFailurePolicy.FAIL.
        """
        config: GameConfig = self._config_resolver(launch_identifier)
        plan: CommandPlan = commandPlan_assemble(
            config, target_command, self._assembly_context
        )
        environment = LaunchEnvironment.capture(config.environment_variables)

        report = LaunchReport(command=plan.commandString_build(), exit_code=None)
        compositor: Optional[CompositorProcess] = None
        runtime_log: Optional[ProcessOutputLog] = None
        try:
            compositor_fragment = plan.fragment_get(WrapperKind.COMPOSITOR)
            if compositor_fragment is not None and config.gamescope.steam_overlay_fix:
                compositor = CompositorProcess.spawn(
                    compositor_fragment.text, environment.compositorEnv_build()
                )
                report.discovery = self._display_discover(compositor)
                if report.discovery.isFound():
                    report.display_number = report.discovery.display_number
                    plan = plan.fragments_without(WrapperKind.COMPOSITOR)
                    logger.info(
                        "gamescope started Xwayland on :%d, launching the game there",
                        report.display_number,
                    )
                else:
                    logger.warning(
                        "Disabled gamescope steam_overlay_fix, no Xwayland display was "
                        "discovered (%s). Running gamescope inline instead, DISPLAY stays %s.",
                        report.discovery.error or report.discovery.status.value,
                        environment.display_get() or "unset",
                    )
                    # Only the inline gamescope may run alongside the game
                    report.teardown = compositor.teardown(self._reap_timeout_sec)
                    compositor = None

            report.command = plan.commandString_build()
            runtime_log = self._target_run(
                report,
                launch_identifier,
                environment.targetEnv_build(report.display_number),
            )
        finally:
            if compositor is not None:
                report.teardown = compositor.teardown(self._reap_timeout_sec)

        if want_persistent_log and runtime_log is not None:
            self._log_persist(report, runtime_log)
        return report

    def _display_discover(self, compositor: CompositorProcess) -> DiscoveryOutcome:
        """
        Scan the compositor's stderr for its nested display.

        Args:
            compositor: Freshly spawned compositor.

        Returns:
            Discovery outcome; failures are outcomes, never exceptions.
        """
        task = DisplayDiscoveryTask(compositor.stderr)
        task.start()
        outcome = task.result_wait(self._discovery_timeout_sec)
        logger.debug("Display discovery: %s", outcome)
        return outcome

    def _target_run(
        self, report: LaunchReport, launch_identifier: str, env: dict[str, str]
    ) -> Optional[ProcessOutputLog]:
        """
        Run the assembled command and wait for it.

        Args:
            report: Report to fill with exit code and log path.
            launch_identifier: Names the runtime log.
            env: Child environment.

        Returns:
            Runtime log the game's stderr went to, None if it could not be created.

        Raises:
            ProcessSpawnError: If the shell could not be started.
        """
        runtime_log: Optional[ProcessOutputLog] = None
        log_handle: Optional[IO[bytes]] = None
        try:
            runtime_log, log_handle = self._log_sink.open_for_write(
                launch_identifier, OutputLogKind.STDERR
            )
            report.runtime_log = runtime_log.path_get()
        except LogStorageError as e:
            logger.error("%s; the game's stderr will not be captured", e)
            report.log_errors.append(str(e))

        logger.info("Launching the game with [%s]", report.command)
        try:
            process = subprocess.Popen(
                [settings.SHELL_PATH, "-c", report.command],
                stderr=log_handle,
                env=env,
            )
        except OSError as e:
            raise ProcessSpawnError("target", str(e)) from e
        finally:
            if log_handle is not None:
                log_handle.close()

        report.exit_code = process.wait()
        logger.info("Game exited with status %d", report.exit_code)
        return runtime_log

    def _log_persist(self, report: LaunchReport, runtime_log: ProcessOutputLog) -> None:
        """
        Copy the runtime log to persistent storage under the failure policy.

        Raises:
            LogStorageError: On copy failure with LogFailurePolicy.FAIL.
        """
        try:
            report.persistent_log = self._log_sink.persist(runtime_log)
        except LogStorageError as e:
            if self._log_failure_policy is LogFailurePolicy.FAIL:
                raise
            logger.error("%s", e)
            report.log_errors.append(str(e))
