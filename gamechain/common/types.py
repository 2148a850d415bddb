"""Common types and data structures for gamechain"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class WrapperKind(Enum):
    """Wrapper tools, declared in launch-chain precedence order"""
    GAMEMODE = "gamemode"
    OVERLAY = "overlay"
    COMPOSITOR = "compositor"
    FRAME_LIMITER = "frame_limiter"
    DRIVER_SHIM = "driver_shim"


class VulkanDriver(Enum):
    """Vulkan driver selection"""
    DEFAULT = "default"  # Whatever the loader picks, no shim
    AMDVLK = "amdvlk"
    RADV = "radv"


class GamescopeBackend(Enum):
    """Gamescope output backend"""
    AUTO = "auto"
    WAYLAND = "wayland"


class OutputLogKind(Enum):
    """Captured process stream"""
    STDERR = "errlog"
    STDOUT = "outlog"

    def fileExtension_get(self) -> str:
        """Return the log file extension for this stream"""
        return self.value


class DiscoveryStatus(Enum):
    """How a display discovery attempt ended"""
    FOUND = "found"
    STREAM_CLOSED = "stream_closed"          # EOF without a match
    STREAM_UNAVAILABLE = "stream_unavailable"  # No stderr handle at all
    READ_FAILED = "read_failed"
    TIMEOUT = "timeout"


class TerminationOutcome(Enum):
    """Result of signalling the compositor"""
    SIGNALLED = "signalled"
    ALREADY_EXITED = "already_exited"  # ESRCH
    SIGNAL_FAILED = "signal_failed"


class LogFailurePolicy(Enum):
    """What a persistent-log copy failure does to the launch result"""
    REPORT = "report"
    FAIL = "fail"


@dataclass(frozen=True)
class ScreenResolution:
    """Gamescope source resolution: native (width/height None) or custom"""
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def native(cls) -> "ScreenResolution":
        """Resolution taken from the current display at assembly time"""
        return cls()

    @classmethod
    def custom(cls, width: int, height: int) -> "ScreenResolution":
        """Explicit resolution"""
        return cls(width=width, height=height)

    def isNative(self) -> bool:
        """Check if this resolution must be queried from the display"""
        return self.width is None or self.height is None


@dataclass(frozen=True)
class DiscoveryOutcome:
    """Single result of a display discovery attempt"""
    status: DiscoveryStatus
    display_number: Optional[int] = None
    lines_read: int = 0
    error: Optional[str] = None

    def isFound(self) -> bool:
        """Check if a nested display number was discovered"""
        return self.status is DiscoveryStatus.FOUND and self.display_number is not None
