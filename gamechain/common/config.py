"""Configuration file loading and management"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from gamechain.common.errors import (
    ConfigEncodingError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigPermissionError,
    RootUserError,
)
from gamechain.common.types import (
    GamescopeBackend,
    LogFailurePolicy,
    ScreenResolution,
    VulkanDriver,
)

GAME_CONFIG_DIR_ENV = "GAMECHAIN_GAME_CONFIG_DIR"
GAME_CONFIG_EXTENSION = ".yml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class GamescopeConfig:
    """Gamescope compositor settings"""
    enabled: bool = True
    source_resolution: ScreenResolution = field(default_factory=ScreenResolution.native)
    start_as_fullscreen: bool = True
    force_grab_cursor: bool = True
    tearing: bool = True
    steam_overlay_fix: bool = True  # Run gamescope separately and discover its Xwayland display
    mangoapp: bool = True
    backend: GamescopeBackend = GamescopeBackend.AUTO
    expose_wayland: bool = False


@dataclass(frozen=True)
class GameConfig:
    """Fully resolved launch configuration for one game"""
    gamemode: bool = True
    mangohud: bool = True
    fps_limit: int = 0  # 0 disables the frame limiter
    vulkan_driver: VulkanDriver = VulkanDriver.DEFAULT
    gamescope: GamescopeConfig = field(default_factory=GamescopeConfig)
    environment_variables: Mapping[str, str] = field(default_factory=dict)


@dataclass
class LoggingConfig:
    """Logging configuration settings"""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class LauncherConfig:
    """Launcher tuning settings"""
    discovery_timeout_sec: float = 5.0
    compositor_reap_timeout_sec: float = 10.0
    runtime_log_dir: Optional[str] = None
    persistent_log_dir: Optional[str] = None
    log_failure_policy: LogFailurePolicy = LogFailurePolicy.REPORT


@dataclass
class Config:
    """Complete application configuration"""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    launcher: LauncherConfig = field(default_factory=LauncherConfig)


def _enum_parse(enum_type: Any, value: Any, key: str) -> Any:
    """
    Parse a case-insensitive enum value

    Raises:
        ValueError: If value is not a member of enum_type
    """
    try:
        return enum_type(str(value).lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_type)
        raise ValueError(f"Invalid {key} '{value}'. Supported: {choices}") from None


def _bool_parse(data: Mapping[str, Any], key: str, default: bool) -> bool:
    """Read an optional boolean key, rejecting non-boolean values"""
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got '{value}'")
    return value


def _section_get(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Read an optional config section, rejecting non-mapping values"""
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ValueError(f"{key} section must be a mapping, got '{section}'")
    return section


def _float_parse(data: Mapping[str, Any], key: str, default: float) -> float:
    """Read an optional number"""
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got '{value}'")
    return float(value)


class ConfigLoader:
    """Loads and parses the application configuration from YAML files"""

    DEFAULT_CONFIG_PATHS = [
        "config.yml",
        "~/.config/gamechain/config.yml",
        "/etc/gamechain/config.yml",
    ]

    @staticmethod
    def configFile_find() -> Optional[Path]:
        """
        Find configuration file in standard locations

        Returns:
            Path to config file, or None if not found
        """
        for config_path in ConfigLoader.DEFAULT_CONFIG_PATHS:
            path = Path(config_path).expanduser().resolve()
            if path.exists() and path.is_file():
                return path
        return None

    @staticmethod
    def yaml_load(file_path: Path) -> Dict[str, Any]:
        """
        Load YAML configuration file

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed configuration dictionary. An empty file yields an empty dict.

        Raises:
            FileNotFoundError: If file does not exist
            yaml.YAMLError: If file is not valid YAML
        """
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {file_path} must contain a YAML dictionary")

        return data

    @staticmethod
    def config_parse(data: Dict[str, Any]) -> Config:
        """
        Parse configuration dictionary into Config object

        Every section and key is optional; missing values take the defaults.

        Args:
            data: Raw configuration dictionary

        Returns:
            Parsed Config object

        Raises:
            ValueError: If a section or value has the wrong shape
        """
        defaults = LauncherConfig()

        logging_data = _section_get(data, "logging")
        level = str(logging_data.get("level", LoggingConfig.level)).upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid logging.level '{logging_data.get('level')}'. "
                f"Supported: {', '.join(LOG_LEVELS)}"
            )
        logging = LoggingConfig(
            level=level,
            file=logging_data.get("file"),
            format=str(logging_data.get("format", LoggingConfig.format)),
        )

        launcher_data = _section_get(data, "launcher")
        launcher = LauncherConfig(
            discovery_timeout_sec=_float_parse(
                launcher_data, "discovery_timeout_sec", defaults.discovery_timeout_sec
            ),
            compositor_reap_timeout_sec=_float_parse(
                launcher_data, "compositor_reap_timeout_sec", defaults.compositor_reap_timeout_sec
            ),
            runtime_log_dir=launcher_data.get("runtime_log_dir"),
            persistent_log_dir=launcher_data.get("persistent_log_dir"),
            log_failure_policy=_enum_parse(
                LogFailurePolicy,
                launcher_data.get("log_failure_policy", defaults.log_failure_policy.value),
                "log_failure_policy",
            ),
        )
        if launcher.discovery_timeout_sec <= 0:
            raise ValueError("launcher.discovery_timeout_sec must be positive")

        return Config(logging=logging, launcher=launcher)

    @staticmethod
    def config_load(file_path: Optional[Path] = None) -> Config:
        """
        Load configuration from file

        Args:
            file_path: Optional path to config file. If None, searches standard
                locations and falls back to built-in defaults when none exists.

        Returns:
            Parsed Config object

        Raises:
            FileNotFoundError: If an explicit config file does not exist
            ValueError: If config file is invalid
        """
        if file_path is None:
            file_path = ConfigLoader.configFile_find()
            if file_path is None:
                return Config()

        try:
            data = ConfigLoader.yaml_load(file_path)
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark
            position = f"{mark.line + 1}:{mark.column + 1}" if mark is not None else "0:0"
            raise ValueError(
                f"Failed to parse the configuration file at `{file_path}`, "
                f"position {position}. {e.problem}."
            ) from e
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse the configuration file at `{file_path}`: {e}") from e

        try:
            return ConfigLoader.config_parse(data)
        except ValueError as e:
            raise ValueError(f"Invalid configuration file `{file_path}`: {e}") from e

    @staticmethod
    def configWithOverrides_load(
        file_path: Optional[Path] = None,
        **overrides: Any
    ) -> Config:
        """
        Load configuration and apply command-line overrides

        Args:
            file_path: Optional path to config file
            **overrides: Key-value pairs to override config values

        Returns:
            Config object with overrides applied
        """
        config = ConfigLoader.config_load(file_path)

        if overrides.get("discovery_timeout") is not None:
            config.launcher.discovery_timeout_sec = float(overrides["discovery_timeout"])
        if overrides.get("log_file") is not None:
            config.logging.file = overrides["log_file"]

        return config


class GameConfigLoader:
    """Locates and parses per-game launch configuration files"""

    @staticmethod
    def configDirectory_get() -> Path:
        """
        Resolve the directory holding per-game configuration files

        Returns:
            `$GAMECHAIN_GAME_CONFIG_DIR` when set, else ~/.config/gamechain/games

        Raises:
            RootUserError: When running as root without an explicit directory
        """
        override = os.environ.get(GAME_CONFIG_DIR_ENV)
        if override:
            return Path(override).expanduser()
        if os.geteuid() == 0:
            raise RootUserError(GAME_CONFIG_DIR_ENV)
        return Path("~/.config/gamechain/games").expanduser()

    @staticmethod
    def configFile_find(launch_identifier: str) -> Optional[Path]:
        """
        Find the configuration file for a launch identifier

        Args:
            launch_identifier: Game executable name or Steam app id

        Returns:
            Path to the config file, or None if the game has no config

        Raises:
            ConfigPermissionError: If the config directory is not readable
            ConfigNotFoundError: If the config directory path is broken
        """
        directory = GameConfigLoader.configDirectory_get()
        config_path = directory / f"{launch_identifier}{GAME_CONFIG_EXTENSION}"
        try:
            if not directory.is_dir():
                if directory.exists():
                    raise ConfigNotFoundError(directory)
                return None
            return config_path if config_path.is_file() else None
        except PermissionError:
            raise ConfigPermissionError(directory) from None

    @staticmethod
    def screenResolution_parse(value: Any) -> ScreenResolution:
        """
        Parse a source resolution value

        Accepts `native`, `WIDTHxHEIGHT` or a mapping with width/height.

        Raises:
            ValueError: On any other shape
        """
        if value is None or (isinstance(value, str) and value.lower() == "native"):
            return ScreenResolution.native()
        if isinstance(value, str) and "x" in value.lower():
            width_text, height_text = value.lower().split("x", 1)
            return ScreenResolution.custom(int(width_text), int(height_text))
        if isinstance(value, dict) and "width" in value and "height" in value:
            return ScreenResolution.custom(int(value["width"]), int(value["height"]))
        raise ValueError(
            f"Invalid source_resolution '{value}'. Use native, WIDTHxHEIGHT "
            "or {width: W, height: H}"
        )

    @staticmethod
    def gamescope_parse(data: Any) -> GamescopeConfig:
        """
        Parse the gamescope section

        `gamescope: false` or `gamescope: null` disables the compositor.
        """
        if data is None or data is False:
            return GamescopeConfig(enabled=False)
        if data is True:
            return GamescopeConfig()
        if not isinstance(data, dict):
            raise ValueError("gamescope must be a mapping, true or false")

        defaults = GamescopeConfig()
        return GamescopeConfig(
            enabled=_bool_parse(data, "enabled", defaults.enabled),
            source_resolution=GameConfigLoader.screenResolution_parse(
                data.get("source_resolution")
            ),
            start_as_fullscreen=_bool_parse(data, "start_as_fullscreen", defaults.start_as_fullscreen),
            force_grab_cursor=_bool_parse(data, "force_grab_cursor", defaults.force_grab_cursor),
            tearing=_bool_parse(data, "tearing", defaults.tearing),
            steam_overlay_fix=_bool_parse(data, "steam_overlay_fix", defaults.steam_overlay_fix),
            mangoapp=_bool_parse(data, "mangoapp", defaults.mangoapp),
            backend=_enum_parse(GamescopeBackend, data.get("backend", "auto"), "backend"),
            expose_wayland=_bool_parse(data, "expose_wayland", defaults.expose_wayland),
        )

    @staticmethod
    def gameConfig_parse(data: Dict[str, Any]) -> GameConfig:
        """
        Parse a per-game configuration dictionary

        Args:
            data: Raw configuration dictionary

        Returns:
            Parsed GameConfig with defaults for omitted keys

        Raises:
            ValueError: If a value has the wrong shape
        """
        defaults = GameConfig()

        fps_limit = data.get("fps_limit", defaults.fps_limit)
        if isinstance(fps_limit, bool) or not isinstance(fps_limit, int) or fps_limit < 0:
            raise ValueError(f"fps_limit must be a non-negative integer, got '{fps_limit}'")

        env_data = data.get("environment_variables") or {}
        if isinstance(env_data, list):
            # [[KEY, VALUE], ...] pairs; later entries win
            env_data = {str(pair[0]): pair[1] for pair in env_data}
        if not isinstance(env_data, dict):
            raise ValueError("environment_variables must be a mapping of NAME: value")
        environment_variables = {str(key): str(value) for key, value in env_data.items()}

        return GameConfig(
            gamemode=_bool_parse(data, "gamemode", defaults.gamemode),
            mangohud=_bool_parse(data, "mangohud", defaults.mangohud),
            fps_limit=fps_limit,
            vulkan_driver=_enum_parse(
                VulkanDriver, data.get("vulkan_driver", "default"), "vulkan_driver"
            ),
            gamescope=GameConfigLoader.gamescope_parse(data.get("gamescope", True)),
            environment_variables=environment_variables,
        )

    @staticmethod
    def gameConfigFile_load(file_path: Path) -> GameConfig:
        """
        Load and parse a per-game configuration file

        Args:
            file_path: Path to the YAML file

        Returns:
            Parsed GameConfig

        Raises:
            ConfigPermissionError, ConfigNotFoundError, ConfigEncodingError,
            ConfigParseError: Mapped from the underlying I/O or YAML failure
        """
        try:
            data = ConfigLoader.yaml_load(file_path)
        except PermissionError:
            raise ConfigPermissionError(file_path) from None
        except FileNotFoundError:
            raise ConfigNotFoundError(file_path) from None
        except UnicodeDecodeError as e:
            raise ConfigEncodingError(file_path, str(e)) from e
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark
            line = mark.line + 1 if mark is not None else 0
            column = mark.column + 1 if mark is not None else 0
            raise ConfigParseError(file_path, str(e.problem), line, column) from e
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigParseError(file_path, str(e), 0, 0) from e

        try:
            return GameConfigLoader.gameConfig_parse(data)
        except (ValueError, TypeError, IndexError, KeyError) as e:
            raise ConfigParseError(file_path, str(e), 0, 0) from e
