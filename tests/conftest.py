"""Pytest configuration and shared fixtures for gamechain tests

This module provides common fixtures and test utilities used across
the unit tests: throwaway game config directories, fake wrapper tools and
a fake gamescope that prints scripted stderr lines.
"""

import logging
import stat
from pathlib import Path
from typing import Callable, Generator

import pytest

from gamechain.common.config import GameConfig, GamescopeConfig
from gamechain.common.settings import settings
from gamechain.common.types import ScreenResolution
from gamechain.launcher.command import AssemblyContext
from gamechain.launcher.tools import ToolSpec


@pytest.fixture
def reset_settings() -> Generator[None, None, None]:
    """Reset settings singleton between tests

    This fixture ensures each test gets a fresh Settings instance.
    """
    settings._initialized = False
    settings._config = None
    yield
    settings._initialized = False
    settings._config = None


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Setup logging for tests"""
    caplog.set_level(logging.DEBUG)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path) -> None:
    """Keep tests away from the user's config, logs and gamescope"""
    monkeypatch.setenv("GAMECHAIN_GAME_CONFIG_DIR", str(tmp_path / "games"))
    monkeypatch.delenv("GAMECHAIN_GAMESCOPE_PATH", raising=False)
    monkeypatch.delenv("GAMECHAIN_DEBUG", raising=False)


@pytest.fixture
def fake_resolver() -> Callable[[ToolSpec], str]:
    """Resolver that pretends every wrapper is installed in /usr/bin"""

    def _resolve(tool: ToolSpec) -> str:
        return f"/usr/bin/{tool.executable_name}"

    return _resolve


@pytest.fixture
def assembly_context(fake_resolver) -> AssemblyContext:
    """Assembly collaborators with fixed tools and a 2560x1440 native screen"""
    return AssemblyContext(resolver=fake_resolver, resolution_provider=lambda: (2560, 1440))


@pytest.fixture
def script_write(tmp_path) -> Callable[[str, str], Path]:
    """Write an executable /bin/sh script into tmp_path"""

    def _write(name: str, body: str) -> Path:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _write


@pytest.fixture
def fake_gamescope(script_write, monkeypatch) -> Callable[..., Path]:
    """Install a fake gamescope that prints the given stderr lines

    Gamescope flags are skipped. When a command follows them (gamescope run
    inline) it is exec'd after printing. Otherwise, with `linger=True` it keeps
    running like a real compositor until interrupted, or exits right away.
    """

    def _install(lines: list[str], linger: bool = True) -> Path:
        body = (
            'while [ $# -gt 0 ]; do\n'
            '    case "$1" in\n'
            '        -w|-h|--backend) shift 2 ;;\n'
            '        --*) shift ;;\n'
            '        *) break ;;\n'
            '    esac\n'
            'done\n'
        )
        body += "".join(f"echo '{line}' >&2\n" for line in lines)
        body += 'if [ $# -gt 0 ]; then exec "$@"; fi\n'
        body += "exec sleep 30\n" if linger else "exit 0\n"
        path = script_write("gamescope", body)
        monkeypatch.setenv("GAMECHAIN_GAMESCOPE_PATH", str(path))
        return path

    return _install


@pytest.fixture
def bare_config() -> GameConfig:
    """Game config with every wrapper off except gamescope with the overlay fix"""
    return GameConfig(
        gamemode=False,
        mangohud=False,
        gamescope=GamescopeConfig(
            source_resolution=ScreenResolution.custom(1280, 720),
            mangoapp=False,
        ),
    )
