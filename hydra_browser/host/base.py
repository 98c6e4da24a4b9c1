"""
Interfaces the embedding host must provide.

The core never renders anything itself: page rendering, networking and window
compositing belong to the host. These protocols describe the narrow surface the
core consumes. `hydra_browser.host.headless` implements all of them in-process.
"""

from collections.abc import Callable
from typing import Any, Protocol

from hydra_browser.models.pane import Bounds, DeviceEmulation


class ContentEventListener(Protocol):
    """Receives content lifecycle events for one pane. Installed by the core."""

    def on_title_updated(self, title: str) -> None: ...

    def on_loading_changed(self, is_loading: bool) -> None: ...

    def on_navigation_started(self, url: str, is_in_page: bool, is_main_frame: bool) -> None: ...

    def on_navigated(self, url: str) -> None: ...

    def on_navigated_in_page(self, url: str) -> None: ...

    def on_console_message(self, level: int, message: str) -> None: ...

    def on_focus(self) -> None: ...

    def on_new_window(self, url: str) -> bool:
        """Returns True to let the host open a native window, False to deny it."""
        ...


class ContentHandle(Protocol):
    """The web contents hosted inside a view."""

    def load_url(self, url: str) -> None: ...

    def get_url(self) -> str: ...

    def get_title(self) -> str: ...

    def is_loading(self) -> bool: ...

    def can_go_back(self) -> bool: ...

    def can_go_forward(self) -> bool: ...

    def go_back(self) -> None: ...

    def go_forward(self) -> None: ...

    def reload(self) -> None: ...

    def focus(self) -> None: ...

    def close(self) -> None: ...

    def is_dev_tools_opened(self) -> bool: ...

    def open_dev_tools(self, detached: bool = True) -> None: ...

    def close_dev_tools(self) -> None: ...

    def enable_device_emulation(self, emulation: DeviceEmulation) -> None: ...


class HostView(Protocol):
    """A mountable view bound to pixel bounds and one storage context."""

    content: ContentHandle

    def set_bounds(self, bounds: Bounds) -> None: ...


class HostDownload(Protocol):
    """A single transfer as reported by a storage context."""

    filename: str
    url: str

    def get_total_bytes(self) -> int: ...

    def get_received_bytes(self) -> int: ...

    def set_save_path(self, path: str) -> None: ...

    def cancel(self) -> None: ...

    def on_updated(self, callback: Callable[[str], None]) -> None:
        """`callback(state)` where state is 'progressing' or 'interrupted'."""
        ...

    def on_done(self, callback: Callable[[str], None]) -> None:
        """`callback(state)` where state is 'completed', 'cancelled' or 'interrupted'."""
        ...


# callback(download, originating content handle or None)
DownloadStartCallback = Callable[[HostDownload, Any], None]


class StorageContext(Protocol):
    """An isolated storage namespace (cookies, cache, site data)."""

    name: str

    def on_download(self, callback: DownloadStartCallback) -> None: ...

    async def clear_storage_data(self) -> None: ...


class HostWindow(Protocol):
    """The top-level window that panes are mounted into."""

    def create_view(
        self, context: StorageContext, listener: ContentEventListener
    ) -> HostView: ...

    def add_view(self, view: HostView) -> None: ...

    def remove_view(self, view: HostView) -> None: ...

    def is_destroyed(self) -> bool: ...

    def get_bounds(self) -> Bounds: ...

    def is_minimized(self) -> bool: ...

    def is_maximized(self) -> bool: ...

    def restore(self) -> None: ...


class HostShell(Protocol):
    """Desktop integration primitives."""

    def open_path(self, path: str) -> None: ...

    def show_item_in_folder(self, path: str) -> None: ...

    async def pick_directory(self, title: str) -> str | None: ...


# Maps a session partition name (e.g. 'persist:partition-A') to its context.
SessionFactory = Callable[[str], StorageContext]
