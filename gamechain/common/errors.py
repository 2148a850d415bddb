"""
Launch error taxonomy.

Every error raised out of a launch derives from `LaunchError` and carries a
single human-readable message naming the stage that failed. Display discovery
problems and compositor teardown problems are deliberately absent: they are
reported as outcomes and log lines, never raised.
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "LaunchError",
    "ConfigError",
    "ConfigPermissionError",
    "ConfigNotFoundError",
    "ConfigEncodingError",
    "ConfigParseError",
    "RootUserError",
    "MissingToolError",
    "ScreenResolutionError",
    "ProcessSpawnError",
    "LogStorageError",
]


class LaunchError(Exception):
    """Base class for errors that abort (or are reported by) a launch."""

    stage: str = "launch"

    def __str__(self) -> str:
        message: str = super().__str__()
        return f"[{self.stage}] {message}"


class ConfigError(LaunchError):
    """Game configuration could not be resolved."""

    stage = "config"


class ConfigPermissionError(ConfigError):
    """Configuration path is not accessible to the current user."""

    def __init__(self, path: Path) -> None:
        self.path: Path = path
        super().__init__(
            f"User lacks the necessary permissions to access a file/directory in the path `{path}`"
        )


class ConfigNotFoundError(ConfigError):
    """A directory in the configuration path does not exist."""

    def __init__(self, path: Path) -> None:
        self.path: Path = path
        super().__init__(f"A file/directory in the path `{path}` couldn't be found")


class ConfigEncodingError(ConfigError):
    """Configuration file is not valid UTF-8."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path: Path = path
        self.reason: str = reason
        super().__init__(
            f"The configuration file at `{path}` is not encoded in valid UTF-8: {reason}"
        )


class ConfigParseError(ConfigError):
    """Configuration file is malformed."""

    def __init__(self, path: Path, explanation: str, line: int, column: int) -> None:
        self.path: Path = path
        self.explanation: str = explanation
        self.line: int = line
        self.column: int = column
        super().__init__(
            f"Failed to parse the configuration file at `{path}`, "
            f"position {line}:{column}. {explanation}."
        )


class RootUserError(ConfigError):
    """Game configuration lookup attempted as root without an explicit directory."""

    def __init__(self, env_var: str) -> None:
        self.env_var: str = env_var
        super().__init__(
            "The root user can't have a game configuration directory. Run the command "
            f"as a normal user or specify a configuration directory with ${env_var}"
        )


class MissingToolError(LaunchError):
    """A wrapper tool could not be found on $PATH."""

    stage = "assemble"

    def __init__(self, tool: str, install_hint: str | None = None) -> None:
        self.tool: str = tool
        self.install_hint: str | None = install_hint
        message: str = f"`{tool}` could not be found in $PATH."
        if install_hint:
            message += f" Install it from {install_hint}."
        super().__init__(message)


class ScreenResolutionError(LaunchError):
    """Native screen resolution could not be determined."""

    stage = "assemble"


class ProcessSpawnError(LaunchError):
    """The compositor or target process failed to start."""

    def __init__(self, process_stage: str, reason: str) -> None:
        self.stage = process_stage
        self.reason: str = reason
        super().__init__(f"Failed to run the {process_stage} command: {reason}")


class LogStorageError(LaunchError):
    """Output log could not be created or copied."""

    stage = "logs"
