"""
Launch command assembly.

A launch command is an ordered chain of wrapper fragments followed by the
target command, joined with single spaces and handed to `sh -c`. Each wrapper
is a tagged variant in `WRAPPER_BUILDERS`; the registry order is the chain
order, so precedence lives in one place.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional

from gamechain.common.config import GameConfig, GamescopeConfig
from gamechain.common.settings import settings
from gamechain.common.types import GamescopeBackend, WrapperKind
from gamechain.launcher.resolution import (
    ResolutionProvider,
    nativeResolution_get,
    resolutionArgument_build,
)
from gamechain.launcher.tools import (
    GAMEMODERUN,
    GAMESCOPE,
    MANGOHUD,
    STRANGLE,
    VULKAN_DRIVER_TOOLS,
    ToolResolver,
    executable_resolve,
)

logger = logging.getLogger(__name__)

__all__ = [
    "CommandFragment",
    "CommandPlan",
    "AssemblyContext",
    "WRAPPER_BUILDERS",
    "commandPlan_assemble",
    "gamescopeCommand_build",
    "gamescopeExecutable_resolve",
]


@dataclass(frozen=True)
class CommandFragment:
    """One wrapper invocation in the launch chain."""

    kind: WrapperKind
    text: str


@dataclass(frozen=True)
class CommandPlan:
    """Ordered wrapper fragments plus the target command, which always runs last."""

    fragments: tuple[CommandFragment, ...]
    target_command: str

    def commandString_build(self) -> str:
        """
        Join fragments and target with single spaces.

        Returns:
            The string handed to `sh -c`.
        """
        return " ".join([fragment.text for fragment in self.fragments] + [self.target_command])

    def fragment_get(self, kind: WrapperKind) -> Optional[CommandFragment]:
        """Return the fragment of the given kind, if present."""
        for fragment in self.fragments:
            if fragment.kind is kind:
                return fragment
        return None

    def fragments_without(self, kind: WrapperKind) -> "CommandPlan":
        """Return a copy of this plan with one wrapper kind removed."""
        return CommandPlan(
            fragments=tuple(f for f in self.fragments if f.kind is not kind),
            target_command=self.target_command,
        )

    def kinds_get(self) -> tuple[WrapperKind, ...]:
        """Wrapper kinds in chain order."""
        return tuple(fragment.kind for fragment in self.fragments)


@dataclass(frozen=True)
class AssemblyContext:
    """External collaborators used while building fragments."""

    resolver: ToolResolver = executable_resolve
    resolution_provider: ResolutionProvider = nativeResolution_get


def gamescopeExecutable_resolve(resolver: ToolResolver) -> str:
    """
    Resolve gamescope, honouring the $GAMECHAIN_GAMESCOPE_PATH override.

    Args:
        resolver: $PATH resolver used when no override is set.

    Returns:
        Executable path.
    """
    override: str | None = os.environ.get(settings.GAMESCOPE_PATH_ENV)
    if override:
        return override
    return resolver(GAMESCOPE)


def gamescopeCommand_build(
    gamescope: GamescopeConfig,
    executable_path: str,
    resolution_provider: ResolutionProvider = nativeResolution_get,
) -> str:
    """
    Build the gamescope invocation from its sub-configuration.

    Args:
        gamescope: Compositor settings.
        executable_path: gamescope binary.
        resolution_provider: Native resolution lookup.

    Returns:
        Command fragment, flags in fixed order.
    """
    arguments: list[str] = [
        resolutionArgument_build(gamescope.source_resolution, resolution_provider)
    ]

    if gamescope.start_as_fullscreen:
        arguments.append("--fullscreen")
    if gamescope.force_grab_cursor:
        arguments.append("--force-grab-cursor")
    if gamescope.tearing:
        arguments.append("--immediate-flips")
    if gamescope.mangoapp:
        arguments.append("--mangoapp")
    if gamescope.backend is not GamescopeBackend.AUTO:
        arguments.append(f"--backend {gamescope.backend.value}")
    if gamescope.expose_wayland:
        arguments.append("--expose-wayland")

    return f"{executable_path} {' '.join(arguments)}"


def _gamemode_build(config: GameConfig, context: AssemblyContext) -> Optional[str]:
    if not config.gamemode:
        return None
    return context.resolver(GAMEMODERUN)


def _overlay_build(config: GameConfig, context: AssemblyContext) -> Optional[str]:
    if not config.mangohud:
        return None
    return context.resolver(MANGOHUD)


def _compositor_build(config: GameConfig, context: AssemblyContext) -> Optional[str]:
    if not config.gamescope.enabled:
        return None
    executable_path: str = gamescopeExecutable_resolve(context.resolver)
    return gamescopeCommand_build(
        config.gamescope, executable_path, context.resolution_provider
    )


def _frameLimiter_build(config: GameConfig, context: AssemblyContext) -> Optional[str]:
    if config.fps_limit <= 0:
        return None
    return f"{context.resolver(STRANGLE)} {config.fps_limit}"


def _driverShim_build(config: GameConfig, context: AssemblyContext) -> Optional[str]:
    tool = VULKAN_DRIVER_TOOLS.get(config.vulkan_driver)
    if tool is None:
        return None
    return context.resolver(tool)


FragmentBuilder = Callable[[GameConfig, AssemblyContext], Optional[str]]

WRAPPER_BUILDERS: tuple[tuple[WrapperKind, FragmentBuilder], ...] = (
    (WrapperKind.GAMEMODE, _gamemode_build),
    (WrapperKind.OVERLAY, _overlay_build),
    (WrapperKind.COMPOSITOR, _compositor_build),
    (WrapperKind.FRAME_LIMITER, _frameLimiter_build),
    (WrapperKind.DRIVER_SHIM, _driverShim_build),
)
"""Wrapper builders in launch-chain order"""


def commandPlan_assemble(
    config: GameConfig,
    target_command: str,
    context: AssemblyContext | None = None,
) -> CommandPlan:
    """
    Assemble the wrapper chain for a game.

    Args:
        config: Resolved game configuration.
        target_command: Command that starts the game; always last in the chain.
        context: Tool and resolution collaborators, defaults to $PATH and Xlib.

    Returns:
        Command plan.

    Raises:
        MissingToolError: If an enabled wrapper is not installed.
        ScreenResolutionError: If native resolution cannot be determined.
    """
    context = context or AssemblyContext()
    fragments: list[CommandFragment] = []
    for kind, builder in WRAPPER_BUILDERS:
        text = builder(config, context)
        if text is not None:
            fragments.append(CommandFragment(kind=kind, text=text))

    plan = CommandPlan(fragments=tuple(fragments), target_command=target_command)
    logger.debug("Assembled wrappers: %s", [kind.value for kind in plan.kinds_get()])
    return plan
