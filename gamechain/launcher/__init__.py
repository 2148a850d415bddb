"""Launch orchestration: command assembly, display discovery and supervision."""

from gamechain.launcher.command import CommandFragment, CommandPlan, commandPlan_assemble
from gamechain.launcher.discovery import DisplayDiscoveryTask, displayNumber_extract
from gamechain.launcher.process import CompositorProcess
from gamechain.launcher.supervisor import LaunchReport, LaunchSupervisor

__all__ = [
    "CommandFragment",
    "CommandPlan",
    "CompositorProcess",
    "DisplayDiscoveryTask",
    "LaunchReport",
    "LaunchSupervisor",
    "commandPlan_assemble",
    "displayNumber_extract",
]
