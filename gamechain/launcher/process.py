"""Compositor process handle: spawn, interrupt, reap."""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
from typing import Mapping, Optional, TextIO

from gamechain.common.errors import ProcessSpawnError
from gamechain.common.types import TerminationOutcome

logger = logging.getLogger(__name__)

__all__ = ["CompositorProcess"]


class CompositorProcess:
    """Exclusive owner of one spawned compositor for the length of a launch."""

    def __init__(self, process: subprocess.Popen[str], command: str) -> None:
        """
        Wrap an already spawned process.

        Args:
            process: Spawned compositor.
            command: Command line it was started with, for log lines.
        """
        self._process: subprocess.Popen[str] = process
        self._command: str = command
        self._torn_down: bool = False

    @classmethod
    def spawn(cls, command: str, env: Optional[Mapping[str, str]] = None) -> "CompositorProcess":
        """
        Start the compositor with its stderr captured.

        The command is split with shlex and executed directly, so signals
        reach the compositor itself rather than an intermediate shell.

        Args:
            command: Compositor command line.
            env: Child environment, None inherits ours.

        Returns:
            Process handle.

        Raises:
            ProcessSpawnError: If the process could not be started.
        """
        try:
            process = subprocess.Popen(
                shlex.split(command),
                stdin=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=dict(env) if env is not None else None,
            )
        except (OSError, ValueError) as e:
            raise ProcessSpawnError("compositor", str(e)) from e
        logger.info("Started compositor (pid %d): %s", process.pid, command)
        return cls(process, command)

    @property
    def pid(self) -> int:
        """Process id of the compositor"""
        return self._process.pid

    @property
    def stderr(self) -> Optional[TextIO]:
        """Captured stderr stream, None if unavailable"""
        return self._process.stderr

    def terminate(self) -> TerminationOutcome:
        """
        Send SIGINT to the compositor.

        A compositor that is already gone (ESRCH) is a successful teardown.

        Returns:
            Termination outcome.
        """
        try:
            os.kill(self._process.pid, signal.SIGINT)
        except ProcessLookupError:
            logger.debug("Compositor (pid %d) already exited", self._process.pid)
            return TerminationOutcome.ALREADY_EXITED
        except OSError as e:
            logger.error(
                "Failed to terminate the compositor (pid %d), it might still be running "
                "in the background: %s",
                self._process.pid,
                e,
            )
            return TerminationOutcome.SIGNAL_FAILED
        return TerminationOutcome.SIGNALLED

    def exit_wait(self, timeout: Optional[float] = None) -> Optional[int]:
        """
        Reap the compositor.

        Args:
            timeout: Seconds to wait, None waits indefinitely.

        Returns:
            Exit status, or None if it could not be reaped (logged).
        """
        try:
            return self._process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.error(
                "Compositor (pid %d) did not exit within %ss after SIGINT",
                self._process.pid,
                timeout,
            )
        except (OSError, ChildProcessError) as e:
            logger.error("Failed to wait for the compositor (pid %d): %s", self._process.pid, e)
        return None

    def teardown(self, timeout: Optional[float] = None) -> TerminationOutcome:
        """
        Interrupt and reap the compositor; never raises.

        Reaping is attempted even when the process had already exited so no
        zombie is left behind. Repeated calls are no-ops.

        Args:
            timeout: Reap bound in seconds.

        Returns:
            Termination outcome of the signal step.
        """
        if self._torn_down:
            return TerminationOutcome.ALREADY_EXITED
        self._torn_down = True

        outcome = self.terminate()
        if outcome is not TerminationOutcome.SIGNAL_FAILED:
            status = self.exit_wait(timeout)
            if status is not None:
                logger.debug("Compositor (pid %d) exited with status %s", self.pid, status)
        # stderr stays open: the discovery reader drains it until EOF
        return outcome
