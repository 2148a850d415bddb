"""Per-launch child environments."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from gamechain.common.settings import settings

__all__ = ["LaunchEnvironment"]


@dataclass(frozen=True)
class LaunchEnvironment:
    """
    Snapshot of our environment plus a game's overrides.

    Children get explicit environment maps built from the snapshot; our own
    `os.environ` is never written, so nothing needs restoring afterwards and
    overlapping launches cannot see each other's DISPLAY.
    """

    base: Mapping[str, str]
    overrides: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def capture(cls, overrides: Mapping[str, str]) -> "LaunchEnvironment":
        """
        Snapshot the current process environment.

        Args:
            overrides: Game configuration environment variables.

        Returns:
            Launch environment.
        """
        return cls(base=dict(os.environ), overrides=dict(overrides))

    def compositorEnv_build(self) -> dict[str, str]:
        """Environment for the separately supervised compositor."""
        return dict(self.base)

    def targetEnv_build(self, display_number: Optional[int] = None) -> dict[str, str]:
        """
        Environment for the launch command.

        Args:
            display_number: Nested display to render into, None keeps ours.

        Returns:
            Child environment; configured overrides win over the display.
        """
        env: dict[str, str] = dict(self.base)
        if display_number is not None:
            env[settings.DISPLAY_ENV] = f":{display_number}"
        env.update(self.overrides)
        return env

    def display_get(self) -> Optional[str]:
        """DISPLAY as it was when the snapshot was taken."""
        return self.base.get(settings.DISPLAY_ENV)
