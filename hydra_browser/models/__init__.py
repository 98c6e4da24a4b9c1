"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application: panes, workspaces, downloads and settings.
"""

from .download import DownloadItem, DownloadState
from .pane import (
    Bounds,
    ConsoleLevel,
    ConsoleState,
    CreatePaneOptions,
    DeviceEmulation,
    PaneConfig,
    PaneResolution,
    PaneState,
    UpdatePaneOptions,
)
from .settings import AppSettings, WindowState
from .workspace import WorkspaceConfig, WorkspacesDocument

__all__ = [
    "AppSettings",
    "Bounds",
    "ConsoleLevel",
    "ConsoleState",
    "CreatePaneOptions",
    "DeviceEmulation",
    "DownloadItem",
    "DownloadState",
    "PaneConfig",
    "PaneResolution",
    "PaneState",
    "UpdatePaneOptions",
    "WindowState",
    "WorkspaceConfig",
    "WorkspacesDocument",
]
