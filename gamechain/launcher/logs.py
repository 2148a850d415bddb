"""
Captured process output logs.

Each launch writes the game's stderr to a runtime log under
``/run/user/<uid>/gamechain/process-output-logs/<identifier>/<timestamp>.errlog``.
When asked, the finished log is copied into the persistent log directory in
the user's home so it survives a reboot.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import IO

from gamechain.common.errors import LogStorageError
from gamechain.common.settings import settings
from gamechain.common.types import OutputLogKind

logger = logging.getLogger(__name__)

__all__ = [
    "ProcessOutputLog",
    "OutputLogSink",
    "runtimeLogDirectory_get",
    "persistentLogDirectory_get",
]


def runtimeLogDirectory_get() -> Path:
    """
    Default runtime log directory (cleared on reboot).

    Returns:
        `$XDG_RUNTIME_DIR/gamechain/process-output-logs`, or the
        `/run/user/<uid>` equivalent.
    """
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR") or f"/run/user/{os.getuid()}"
    return Path(runtime_dir) / settings.PACKAGE_NAME / settings.LOG_SUBDIRECTORY


def persistentLogDirectory_get() -> Path:
    """Default persistent log directory in the user's home."""
    return (
        Path("~/.local/share").expanduser()
        / settings.PACKAGE_NAME
        / settings.LOG_SUBDIRECTORY
    )


@dataclass(frozen=True)
class ProcessOutputLog:
    """One captured stream of one launch."""

    identifier: str
    timestamp: datetime
    kind: OutputLogKind
    base_directory: Path

    def path_get(self) -> Path:
        """Path of the log file."""
        readable_timestamp = self.timestamp.strftime(settings.READABLE_TIMESTAMP_FORMAT)
        return (
            self.base_directory
            / self.identifier
            / f"{readable_timestamp}.{self.kind.fileExtension_get()}"
        )

    def rebased(self, base_directory: Path) -> "ProcessOutputLog":
        """Same log name under another base directory."""
        return ProcessOutputLog(self.identifier, self.timestamp, self.kind, base_directory)


class OutputLogSink:
    """Creates runtime logs and copies them to persistent storage."""

    def __init__(
        self,
        runtime_directory: Path | None = None,
        persistent_directory: Path | None = None,
    ) -> None:
        """
        Initialize log sink.

        Args:
            runtime_directory: Base for runtime logs, default per-user /run.
            persistent_directory: Base for persistent copies, default ~/.local/share.
        """
        self._runtime_directory: Path = runtime_directory or runtimeLogDirectory_get()
        self._persistent_directory: Path = persistent_directory or persistentLogDirectory_get()

    def open_for_write(self, identifier: str, kind: OutputLogKind) -> tuple[ProcessOutputLog, IO[bytes]]:
        """
        Create a fresh runtime log and open it for the child process to write.

        Args:
            identifier: Launch identifier naming the log directory.
            kind: Captured stream.

        Returns:
            Log descriptor and a binary file handle; the caller closes it.

        Raises:
            LogStorageError: If the log file cannot be created.
        """
        log = ProcessOutputLog(
            identifier=identifier,
            timestamp=datetime.now(),
            kind=kind,
            base_directory=self._runtime_directory,
        )
        path = log.path_get()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(path, "wb")
        except OSError as e:
            raise LogStorageError(f"Failed to create the output log `{path}`: {e}") from e
        logger.debug("Capturing %s into %s", kind.name.lower(), path)
        return log, handle

    def persist(self, log: ProcessOutputLog) -> Path:
        """
        Copy a runtime log to persistent storage.

        Args:
            log: Runtime log to copy.

        Returns:
            Path of the persistent copy.

        Raises:
            LogStorageError: If the copy fails.
        """
        source = log.path_get()
        destination = log.rebased(self._persistent_directory).path_get()
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)
        except OSError as e:
            raise LogStorageError(
                f"Failed to copy the output log `{source}` to `{destination}`: {e}"
            ) from e
        logger.info("Saved output log to %s", destination)
        return destination
