"""
An in-process host with no rendering engine.

Views keep a navigation history and a title, storage contexts keep a list of
download subscribers, and the shell records what it was asked to open. The CLI
uses it to edit workspaces offline; tests use the `emit_*`/`simulate_*`
helpers to play the part of a real engine.
"""

import logging
from collections.abc import Callable
from typing import Any

from hydra_browser.exceptions import HostError
from hydra_browser.models.pane import Bounds, DeviceEmulation
from hydra_browser.models.settings import WINDOW_DEFAULT_HEIGHT, WINDOW_DEFAULT_WIDTH

from .base import ContentEventListener, DownloadStartCallback

log = logging.getLogger(__name__)


class HeadlessContent:
    """Web contents with a linear back/forward history."""

    def __init__(self, listener: ContentEventListener):
        self.listener = listener
        self._history: list[str] = []
        self._index = -1
        self._title = ""
        self._loading = False
        self._dev_tools_open = False
        self.closed = False
        self.focus_count = 0
        self.reload_count = 0
        self.emulation: DeviceEmulation | None = None

    def load_url(self, url: str) -> None:
        del self._history[self._index + 1 :]
        self._history.append(url)
        self._index = len(self._history) - 1

    def get_url(self) -> str:
        return self._history[self._index] if self._index >= 0 else ""

    def get_title(self) -> str:
        return self._title

    def is_loading(self) -> bool:
        return self._loading

    def can_go_back(self) -> bool:
        return self._index > 0

    def can_go_forward(self) -> bool:
        return self._index < len(self._history) - 1

    def go_back(self) -> None:
        if self.can_go_back():
            self._index -= 1

    def go_forward(self) -> None:
        if self.can_go_forward():
            self._index += 1

    def reload(self) -> None:
        self.reload_count += 1

    def focus(self) -> None:
        self.focus_count += 1

    def close(self) -> None:
        self.closed = True

    def is_dev_tools_opened(self) -> bool:
        return self._dev_tools_open

    def open_dev_tools(self, detached: bool = True) -> None:
        self._dev_tools_open = True

    def close_dev_tools(self) -> None:
        self._dev_tools_open = False

    def enable_device_emulation(self, emulation: DeviceEmulation) -> None:
        self.emulation = emulation

    # Engine-side events

    def simulate_navigation(self, url: str) -> None:
        """Plays a full main-frame navigation: start, commit, title, stop."""
        self.listener.on_navigation_started(url, False, True)
        self._loading = True
        self.listener.on_loading_changed(True)
        self.load_url(url)
        self.listener.on_navigated(url)
        self._title = url
        self.listener.on_title_updated(url)
        self._loading = False
        self.listener.on_loading_changed(False)

    def simulate_in_page_navigation(self, url: str) -> None:
        self.listener.on_navigation_started(url, True, True)
        self.load_url(url)
        self.listener.on_navigated_in_page(url)

    def simulate_subframe_navigation(self, url: str) -> None:
        self.listener.on_navigation_started(url, False, False)

    def emit_console(self, level: int, message: str = "") -> None:
        self.listener.on_console_message(level, message)

    def emit_title(self, title: str) -> None:
        self._title = title
        self.listener.on_title_updated(title)

    def emit_focus(self) -> None:
        self.listener.on_focus()

    def request_new_window(self, url: str) -> bool:
        return self.listener.on_new_window(url)


class HeadlessView:
    def __init__(self, context: "HeadlessStorageContext", listener: ContentEventListener):
        self.context = context
        self.content = HeadlessContent(listener)
        self.bounds = Bounds(width=0, height=0)

    def set_bounds(self, bounds: Bounds) -> None:
        self.bounds = bounds


class HeadlessDownload:
    """A transfer driven by `progress()` and `finish()` calls."""

    def __init__(self, filename: str, url: str, total_bytes: int = 0):
        self.filename = filename
        self.url = url
        self.save_path: str | None = None
        self._total = total_bytes
        self._received = 0
        self._updated: list[Callable[[str], None]] = []
        self._done: list[Callable[[str], None]] = []
        self.finished = False

    def get_total_bytes(self) -> int:
        return self._total

    def get_received_bytes(self) -> int:
        return self._received

    def set_save_path(self, path: str) -> None:
        self.save_path = path

    def cancel(self) -> None:
        self.finish("cancelled")

    def on_updated(self, callback: Callable[[str], None]) -> None:
        self._updated.append(callback)

    def on_done(self, callback: Callable[[str], None]) -> None:
        self._done.append(callback)

    def progress(
        self, received: int, total: int | None = None, interrupted: bool = False
    ) -> None:
        self._received = received
        if total is not None:
            self._total = total
        state = "interrupted" if interrupted else "progressing"
        for callback in list(self._updated):
            callback(state)

    def finish(self, state: str = "completed") -> None:
        if self.finished:
            return
        self.finished = True
        for callback in list(self._done):
            callback(state)


class HeadlessStorageContext:
    def __init__(self, name: str):
        self.name = name
        self._download_callbacks: list[DownloadStartCallback] = []
        self.clear_count = 0

    def on_download(self, callback: DownloadStartCallback) -> None:
        self._download_callbacks.append(callback)

    async def clear_storage_data(self) -> None:
        self.clear_count += 1

    def start_download(
        self, filename: str, url: str, total_bytes: int = 0, origin: Any = None
    ) -> HeadlessDownload:
        item = HeadlessDownload(filename, url, total_bytes)
        for callback in list(self._download_callbacks):
            callback(item, origin)
        return item


class HeadlessWindow:
    def __init__(self, bounds: Bounds | None = None):
        self.views: list[HeadlessView] = []
        self.bounds = bounds or Bounds(
            x=0, y=0, width=WINDOW_DEFAULT_WIDTH, height=WINDOW_DEFAULT_HEIGHT
        )
        self.minimized = False
        self.maximized = False
        self.destroyed = False
        self.fail_view_creation = False

    def create_view(
        self, context: HeadlessStorageContext, listener: ContentEventListener
    ) -> HeadlessView:
        if self.destroyed or self.fail_view_creation:
            raise HostError("Headless window cannot create views right now.")
        return HeadlessView(context, listener)

    def add_view(self, view: HeadlessView) -> None:
        self.views.append(view)

    def remove_view(self, view: HeadlessView) -> None:
        if view in self.views:
            self.views.remove(view)

    def is_destroyed(self) -> bool:
        return self.destroyed

    def get_bounds(self) -> Bounds:
        return self.bounds

    def is_minimized(self) -> bool:
        return self.minimized

    def is_maximized(self) -> bool:
        return self.maximized

    def restore(self) -> None:
        self.minimized = False


class HeadlessShell:
    def __init__(self, picked_directory: str | None = None):
        self.picked_directory = picked_directory
        self.opened: list[str] = []
        self.revealed: list[str] = []

    def open_path(self, path: str) -> None:
        self.opened.append(path)

    def show_item_in_folder(self, path: str) -> None:
        self.revealed.append(path)

    async def pick_directory(self, title: str) -> str | None:
        log.debug(f"Directory picker requested: {title}")
        return self.picked_directory


class HeadlessHost:
    """Bundles one window, one shell and a session factory."""

    def __init__(self, picked_directory: str | None = None):
        self.window = HeadlessWindow()
        self.shell = HeadlessShell(picked_directory)
        self.sessions: dict[str, HeadlessStorageContext] = {}

    def session_from_partition(self, name: str) -> HeadlessStorageContext:
        if name not in self.sessions:
            self.sessions[name] = HeadlessStorageContext(name)
        return self.sessions[name]
