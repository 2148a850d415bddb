"""Native screen resolution lookup for gamescope's source resolution."""

from __future__ import annotations

import logging
import re
import subprocess
from typing import Callable

from Xlib import display as xdisplay
from Xlib.error import DisplayError

from gamechain.common.errors import ScreenResolutionError
from gamechain.common.types import ScreenResolution

logger = logging.getLogger(__name__)

__all__ = [
    "ResolutionProvider",
    "nativeResolution_get",
    "xlibResolution_get",
    "xrandrResolution_get",
    "xrandrOutput_parse",
    "resolutionArgument_build",
]

ResolutionProvider = Callable[[], tuple[int, int]]

_XRANDR_PATTERN = re.compile(r"\bconnected (?:primary )?(\d+)x(\d+)")


def xlibResolution_get(display_name: str | None = None) -> tuple[int, int] | None:
    """
    Query root window geometry of the current X display.

    Args:
        display_name: X display name, None for $DISPLAY.

    Returns:
        (width, height), or None when no X display is reachable.
    """
    try:
        connection = xdisplay.Display(display_name)
    except (DisplayError, OSError) as e:
        logger.debug("X display unavailable for resolution query: %s", e)
        return None
    try:
        geometry = connection.screen().root.get_geometry()
        return int(geometry.width), int(geometry.height)
    finally:
        connection.close()


def xrandrOutput_parse(output: str) -> tuple[int, int] | None:
    """
    Extract the first connected output's mode from `xrandr` output.

    Args:
        output: Raw stdout of `xrandr`.

    Returns:
        (width, height) of the first connected output, or None.
    """
    match = _XRANDR_PATTERN.search(output)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def xrandrResolution_get() -> tuple[int, int] | None:
    """Ask `xrandr` for the current resolution, None if it cannot tell."""
    try:
        result = subprocess.run(
            ["xrandr"], capture_output=True, text=True, timeout=5, check=False
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("xrandr unavailable for resolution query: %s", e)
        return None
    return xrandrOutput_parse(result.stdout)


def nativeResolution_get() -> tuple[int, int]:
    """
    Determine the native resolution of the active display.

    Returns:
        (width, height).

    Raises:
        ScreenResolutionError: If neither Xlib nor xrandr yields a resolution.
    """
    resolution = xlibResolution_get() or xrandrResolution_get()
    if resolution is None:
        raise ScreenResolutionError(
            "Failed to get the native screen resolution, you can set it yourself in the "
            "game configuration file with source_resolution: WIDTHxHEIGHT"
        )
    return resolution


def resolutionArgument_build(
    resolution: ScreenResolution, provider: ResolutionProvider = nativeResolution_get
) -> str:
    """
    Render gamescope's `-w W -h H` source resolution flags.

    Args:
        resolution: Native or custom resolution.
        provider: Native resolution lookup, called only for native mode.

    Returns:
        Flag string.
    """
    if resolution.isNative():
        width, height = provider()
    else:
        width, height = resolution.width, resolution.height
    return f"-w {width} -h {height}"
