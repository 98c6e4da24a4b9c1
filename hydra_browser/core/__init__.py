"""
Core Logic Layer.

Partition registry, pane orchestration, download tracking, workspaces and the
`HydraApp` object that wires them together.
"""

from .app import Command, HydraApp
from .downloads import DownloadTracker
from .events import Notification, NotificationHub
from .panes import PaneOrchestrator
from .partitions import PartitionRegistry
from .workspaces import WorkspaceStore

__all__ = [
    "Command",
    "DownloadTracker",
    "HydraApp",
    "Notification",
    "NotificationHub",
    "PaneOrchestrator",
    "PartitionRegistry",
    "WorkspaceStore",
]
