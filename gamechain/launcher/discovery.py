"""
Nested display discovery from gamescope's stderr.

Gamescope announces the Xwayland server it starts for its clients with a line
such as ``Starting Xwayland on :3``. `DisplayDiscoveryTask` scans the
compositor's stderr on a background thread and hands exactly one
`DiscoveryOutcome` back through a single-use future, so the supervisor can do
other work and then wait at one explicit point, with a bound.

After a match the reader stops matching but keeps draining stderr into the
debug log; gamescope must never block on a full pipe while the game runs.
"""

from __future__ import annotations

import logging
import re
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Iterable, Optional, TextIO

from gamechain.common.settings import settings
from gamechain.common.types import DiscoveryOutcome, DiscoveryStatus

logger = logging.getLogger(__name__)

__all__ = [
    "DISPLAY_NUMBER_MAX",
    "displayNumber_extract",
    "displayNumber_scan",
    "DisplayDiscoveryTask",
]

DISPLAY_NUMBER_MAX = 0xFFFF

_DISPLAY_PATTERN = re.compile(settings.XWAYLAND_DISPLAY_PATTERN)


def displayNumber_extract(line: str) -> Optional[int]:
    """
    Extract the Xwayland display number from one stderr line.

    Args:
        line: Raw line, trailing newline allowed.

    Returns:
        Display number, or None if the line is not an announcement.
    """
    match = _DISPLAY_PATTERN.search(line)
    if match is None:
        return None
    number = int(match.group(1))
    if number > DISPLAY_NUMBER_MAX:
        return None
    return number


def displayNumber_scan(lines: Iterable[str]) -> DiscoveryOutcome:
    """
    Scan lines until the first display announcement.

    Consumes nothing past the matching line.

    Args:
        lines: Line iterator, typically the compositor's stderr.

    Returns:
        FOUND outcome with the display number, or STREAM_CLOSED when the
        iterator is exhausted without a match.
    """
    lines_read = 0
    for line in lines:
        lines_read += 1
        number = displayNumber_extract(line)
        if number is not None:
            return DiscoveryOutcome(
                status=DiscoveryStatus.FOUND, display_number=number, lines_read=lines_read
            )
        logger.debug("gamescope: %s", line.rstrip())
    return DiscoveryOutcome(status=DiscoveryStatus.STREAM_CLOSED, lines_read=lines_read)


class DisplayDiscoveryTask:
    """Background scan of a compositor stderr stream with a one-shot result."""

    def __init__(self, stream: Optional[TextIO], name: str = "gamescope") -> None:
        """
        Initialize discovery task.

        Args:
            stream: Compositor stderr, None if the process has none.
            name: Label used for the reader thread and log lines.
        """
        self._stream: Optional[TextIO] = stream
        self._name: str = name
        self._result: Future[DiscoveryOutcome] = Future()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> Future[DiscoveryOutcome]:
        """
        Start scanning without blocking the caller.

        Returns:
            Future resolved exactly once with the outcome.

        Raises:
            RuntimeError: If the task was already started.
        """
        if self._thread is not None or self._result.done():
            raise RuntimeError("Display discovery task already started")

        if self._stream is None:
            self._outcome_deliver(
                DiscoveryOutcome(
                    status=DiscoveryStatus.STREAM_UNAVAILABLE,
                    error=f"{self._name} process doesn't have a stderr stream",
                )
            )
            return self._result

        self._thread = threading.Thread(
            target=self._stream_read, name=f"{self._name}-discovery", daemon=True
        )
        self._thread.start()
        return self._result

    def result_wait(self, timeout: Optional[float]) -> DiscoveryOutcome:
        """
        Wait for the single discovery outcome.

        Args:
            timeout: Seconds to wait, None waits until the stream closes.

        Returns:
            The delivered outcome, or a TIMEOUT outcome if the bound expired first.
        """
        try:
            return self._result.result(timeout=timeout)
        except FuturesTimeoutError:
            # cancel() fails only if the reader delivered in the meantime
            if self._result.cancel():
                return DiscoveryOutcome(
                    status=DiscoveryStatus.TIMEOUT,
                    error=f"{self._name} did not announce a display within {timeout}s",
                )
            return self._result.result()

    def _stream_read(self) -> None:
        """Reader thread body: scan, deliver, then drain."""
        assert self._stream is not None
        try:
            outcome = displayNumber_scan(iter(self._stream.readline, ""))
        except (OSError, ValueError) as e:
            outcome = DiscoveryOutcome(
                status=DiscoveryStatus.READ_FAILED,
                error=f"Failed to read the next line of {self._name}'s stderr: {e}",
            )
        self._outcome_deliver(outcome)
        if outcome.isFound():
            self._remaining_drain()

    def _outcome_deliver(self, outcome: DiscoveryOutcome) -> None:
        """Resolve the hand-off future unless the waiter already gave up."""
        if self._result.set_running_or_notify_cancel():
            self._result.set_result(outcome)
        else:
            logger.debug("%s discovery result arrived after timeout: %s", self._name, outcome)

    def _remaining_drain(self) -> None:
        """Forward the rest of stderr to the debug log until the stream closes."""
        assert self._stream is not None
        try:
            for line in iter(self._stream.readline, ""):
                logger.debug("%s: %s", self._name, line.rstrip())
        except (OSError, ValueError) as e:
            logger.debug("Stopped draining %s stderr: %s", self._name, e)
