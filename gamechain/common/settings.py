"""Application settings singleton - single source of truth for configuration

This module provides a singleton Settings class that consolidates:
1. Launcher constants (environment variable names, timeouts, log layout)
2. Runtime configuration from config.yml

Usage:
    from gamechain.common.settings import settings

    # Initialize once at startup with loaded config
    config = ConfigLoader.config_load()
    settings.initialize(config)

    # Use anywhere in the application
    timeout = settings.config.launcher.discovery_timeout_sec
"""

from typing import Optional

from gamechain.common.config import Config


class Settings:
    """Singleton settings manager combining config.yml and launcher constants

    This class provides:
    - Constants shared by the assembler, supervisor and log sink
    - Access to runtime configuration loaded from config.yml

    The singleton pattern ensures every launch stage sees the same tunables.
    """

    _instance: Optional["Settings"] = None

    def __new__(cls) -> "Settings":
        """Ensure only one Settings instance exists"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Initialize settings singleton (only runs once)"""
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self._config: Optional[Config] = None

    def initialize(self, config: Config) -> None:
        """
        Initialize with loaded configuration

        Args:
            config: Loaded application configuration
        """
        self._config = config

    # =========================================================================
    # Environment
    # =========================================================================

    PACKAGE_NAME: str = "gamechain"

    DISPLAY_ENV: str = "DISPLAY"
    """Variable naming the X display a child process renders into"""

    GAMESCOPE_PATH_ENV: str = "GAMECHAIN_GAMESCOPE_PATH"
    """Overrides the gamescope executable instead of searching $PATH"""

    DEBUG_ENV: str = "GAMECHAIN_DEBUG"
    """Set to 1 to force DEBUG logging regardless of config and flags"""

    SHELL_PATH: str = "/bin/sh"
    """Shell that interprets the assembled launch command"""

    # =========================================================================
    # Display Discovery
    # =========================================================================

    XWAYLAND_DISPLAY_PATTERN: str = r"Starting Xwayland on :(\d+)"
    """Gamescope stderr line announcing its nested Xwayland display"""

    DEFAULT_DISCOVERY_TIMEOUT_SEC: float = 5.0
    """Upper bound on waiting for gamescope to announce its display"""

    # =========================================================================
    # Output Logs
    # =========================================================================

    READABLE_TIMESTAMP_FORMAT: str = "%Y-%m-%d_%H:%M:%S"
    """Timestamp used to name captured output log files"""

    LOG_SUBDIRECTORY: str = "process-output-logs"

    @property
    def config(self) -> Config:
        """
        Get loaded configuration object

        Returns:
            Loaded configuration

        Raises:
            RuntimeError: If initialize() has not been called
        """
        if self._config is None:
            raise RuntimeError("Settings not initialized. Call settings.initialize(config) first.")
        return self._config

    def isInitialized(self) -> bool:
        """Check whether a configuration has been loaded"""
        return self._config is not None


# Global singleton instance
settings = Settings()
"""Global settings singleton instance

Import this anywhere in the application:
    from gamechain.common.settings import settings
"""
