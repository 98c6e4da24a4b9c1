"""
Host Layer.

Protocols describing the embedding host (views, storage contexts, downloads,
shell) and a headless implementation that needs no rendering engine.
"""

from .base import (
    ContentEventListener,
    ContentHandle,
    HostDownload,
    HostShell,
    HostView,
    HostWindow,
    SessionFactory,
    StorageContext,
)
from .headless import HeadlessHost

__all__ = [
    "ContentEventListener",
    "ContentHandle",
    "HeadlessHost",
    "HostDownload",
    "HostShell",
    "HostView",
    "HostWindow",
    "SessionFactory",
    "StorageContext",
]
