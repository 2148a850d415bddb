"""Wrapper tool catalogue and $PATH resolution."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from typing import Callable

from gamechain.common.errors import MissingToolError
from gamechain.common.types import VulkanDriver

logger = logging.getLogger(__name__)

__all__ = [
    "ToolSpec",
    "ToolResolver",
    "GAMEMODERUN",
    "MANGOHUD",
    "GAMESCOPE",
    "STRANGLE",
    "VULKAN_DRIVER_TOOLS",
    "executable_resolve",
]


@dataclass(frozen=True)
class ToolSpec:
    """Executable name of a wrapper tool plus where to get it."""

    executable_name: str
    install_hint: str | None = None


ToolResolver = Callable[[ToolSpec], str]

GAMEMODERUN = ToolSpec("gamemoderun", "[gamemode](https://github.com/FeralInteractive/gamemode)")
MANGOHUD = ToolSpec("mangohud", "[MangoHud](https://github.com/flightlessmango/MangoHud)")
GAMESCOPE = ToolSpec("gamescope", "[gamescope](https://github.com/ValveSoftware/gamescope)")
STRANGLE = ToolSpec("strangle", "[libstrangle](https://gitlab.com/torkel104/libstrangle)")

_AMD_VULKAN_PREFIXES_HINT = "[amd-vulkan-prefixes](https://gitlab.com/AndrewShark/amd-vulkan-prefixes)"

VULKAN_DRIVER_TOOLS: dict[VulkanDriver, ToolSpec] = {
    VulkanDriver.AMDVLK: ToolSpec("vk_amdvlk", _AMD_VULKAN_PREFIXES_HINT),
    VulkanDriver.RADV: ToolSpec("vk_radv", _AMD_VULKAN_PREFIXES_HINT),
}


def executable_resolve(tool: ToolSpec) -> str:
    """
    Resolve a wrapper tool to an absolute path on $PATH.

    Args:
        tool: Tool to look up.

    Returns:
        Absolute executable path.

    Raises:
        MissingToolError: If the tool is not installed.
    """
    path: str | None = shutil.which(tool.executable_name)
    if path is None:
        raise MissingToolError(tool.executable_name, tool.install_hint)
    logger.debug("Resolved %s -> %s", tool.executable_name, path)
    return path
