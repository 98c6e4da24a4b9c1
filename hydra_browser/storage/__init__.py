"""
Storage Layer.

This package handles all data persistence: the workspaces, window state and
settings JSON documents under the application data directory.
"""

from .json_store import JsonDocument
from .settings_manager import SettingsManager
from .window_state import WindowStateStore

__all__ = ["JsonDocument", "SettingsManager", "WindowStateStore"]
