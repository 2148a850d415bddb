"""Unit tests for per-launch child environments"""

import os

from gamechain.launcher.environment import LaunchEnvironment


class TestLaunchEnvironment:
    """Test child environment construction"""

    def test_capture_snapshots_current_environment(self, monkeypatch):
        monkeypatch.setenv("DISPLAY", ":0")

        environment = LaunchEnvironment.capture({})
        monkeypatch.setenv("DISPLAY", ":9")

        assert environment.display_get() == ":0"

    def test_target_gets_discovered_display(self):
        environment = LaunchEnvironment(base={"DISPLAY": ":0", "HOME": "/home/u"})

        env = environment.targetEnv_build(3)

        assert env["DISPLAY"] == ":3"
        assert env["HOME"] == "/home/u"
        assert environment.base["DISPLAY"] == ":0"

    def test_target_without_display_keeps_ours(self):
        environment = LaunchEnvironment(base={"DISPLAY": ":0"})
        assert environment.targetEnv_build(None)["DISPLAY"] == ":0"

    def test_unset_display_stays_unset(self):
        environment = LaunchEnvironment(base={"HOME": "/home/u"})
        assert "DISPLAY" not in environment.targetEnv_build(None)

    def test_overrides_apply_to_target_only(self):
        """Game variables reach the game, not gamescope"""
        environment = LaunchEnvironment(base={"PATH": "/usr/bin"}, overrides={"DXVK_HUD": "fps"})

        assert environment.targetEnv_build(1)["DXVK_HUD"] == "fps"
        assert "DXVK_HUD" not in environment.compositorEnv_build()

    def test_overrides_win_over_display(self):
        """An explicit DISPLAY in the game config is respected"""
        environment = LaunchEnvironment(base={}, overrides={"DISPLAY": ":7"})
        assert environment.targetEnv_build(3)["DISPLAY"] == ":7"

    def test_building_never_touches_os_environ(self, monkeypatch):
        monkeypatch.setenv("DISPLAY", ":0")
        before = dict(os.environ)
        environment = LaunchEnvironment.capture({"WINEDEBUG": "-all"})

        environment.targetEnv_build(5)
        environment.compositorEnv_build()

        assert dict(os.environ) == before
