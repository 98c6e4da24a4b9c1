"""
The top-level application object.

`HydraApp` constructs every registry once, injects them into their dependents,
and exposes the command surface the presentation layer talks to. There is no
module-level state: each instance is an independent application.
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from hydra_browser.exceptions import UnknownCommandError
from hydra_browser.host.base import HostShell, HostWindow, SessionFactory
from hydra_browser.models.pane import (
    PARTITION_IDS,
    CreatePaneOptions,
    PaneState,
    UpdatePaneOptions,
)
from hydra_browser.models.settings import AppSettings
from hydra_browser.storage.json_store import (
    SETTINGS_FILE,
    WINDOW_STATE_FILE,
    WORKSPACES_FILE,
    JsonDocument,
)
from hydra_browser.storage.settings_manager import SettingsManager
from hydra_browser.storage.window_state import WindowStateStore
from hydra_browser.utils.path import create_dir, get_data_dir
from hydra_browser.utils.structured_logger import create_structured_logger

from .downloads import DownloadTracker
from .events import NotificationHub
from .panes import PaneOrchestrator
from .partitions import PartitionRegistry
from .workspaces import WorkspaceStore

log = logging.getLogger(__name__)


class Command(str, Enum):
    """Commands accepted from the presentation layer, by channel name."""

    PANE_CREATE = "pane:create"
    PANE_CLOSE = "pane:close"
    PANE_UPDATE = "pane:update"
    PANE_NAVIGATE = "pane:navigate"
    PANE_GO_BACK = "pane:goBack"
    PANE_GO_FORWARD = "pane:goForward"
    PANE_RELOAD = "pane:reload"
    PANE_TOGGLE_DEVTOOLS = "pane:toggleDevTools"
    PANE_GET_ALL = "pane:getAll"
    PANE_SET_FOCUS = "pane:setFocus"
    WORKSPACE_CREATE = "workspace:create"
    WORKSPACE_DELETE = "workspace:delete"
    WORKSPACE_RENAME = "workspace:rename"
    WORKSPACE_SWITCH = "workspace:switch"
    WORKSPACE_GET_ALL = "workspace:getAll"
    WORKSPACE_GET_ACTIVE = "workspace:getActive"
    DOWNLOAD_GET_ALL = "download:getAll"
    DOWNLOAD_CANCEL = "download:cancel"
    DOWNLOAD_OPEN_FILE = "download:openFile"
    DOWNLOAD_OPEN_FOLDER = "download:openFolder"
    DOWNLOAD_CLEAR = "download:clear"
    SETTINGS_GET = "settings:get"
    SETTINGS_SET = "settings:set"
    SETTINGS_SELECT_DOWNLOAD_PATH = "settings:selectDownloadPath"
    SETTINGS_CLEAR_AUTOFILL = "settings:clearAutofill"


def _coerce(model: type[BaseModel], value: Any) -> Any:
    """Accepts either a model instance or a plain (camelCase or snake_case) dict."""
    if value is None or isinstance(value, model):
        return value
    return model.model_validate(value)


class HydraApp:
    """Owns and wires the partition, pane, download, workspace and settings services."""

    def __init__(
        self,
        session_factory: SessionFactory,
        shell: HostShell | None = None,
        data_dir: Path | None = None,
        log_dir: Path | None = None,
        enable_json_log: bool = False,
    ):
        self.data_dir = data_dir or get_data_dir()
        self.shell = shell
        self.hub = NotificationHub()
        self.partitions = PartitionRegistry(session_factory)
        self.panes = PaneOrchestrator(
            self.partitions, self.hub, on_spawn=self._on_pane_spawned
        )
        self.downloads = DownloadTracker(
            self.hub, shell=shell, origin_resolver=self.panes.pane_id_for_content
        )
        self.workspaces = WorkspaceStore(
            self.panes, JsonDocument(self.data_dir / WORKSPACES_FILE)
        )
        self.window_state = WindowStateStore(JsonDocument(self.data_dir / WINDOW_STATE_FILE))
        self.settings = SettingsManager(
            JsonDocument(self.data_dir / SETTINGS_FILE), self.data_dir
        )

        self._event_log, notification_logger, self._session_log = create_structured_logger(
            log_dir, enable_json=enable_json_log
        )
        self.hub.subscribe(notification_logger)

        self._pending: set[asyncio.Task] = set()
        self._started_at: float | None = None
        self._handlers: dict[Command, Callable[..., Any]] = {
            Command.PANE_CREATE: self.create_pane,
            Command.PANE_CLOSE: self.close_pane,
            Command.PANE_UPDATE: self.update_pane,
            Command.PANE_NAVIGATE: self.navigate_pane,
            Command.PANE_GO_BACK: self.panes.go_back,
            Command.PANE_GO_FORWARD: self.panes.go_forward,
            Command.PANE_RELOAD: self.panes.reload,
            Command.PANE_TOGGLE_DEVTOOLS: self.panes.toggle_dev_tools,
            Command.PANE_GET_ALL: self.panes.get_all_states,
            Command.PANE_SET_FOCUS: self.panes.set_focus,
            Command.WORKSPACE_CREATE: self.workspaces.create,
            Command.WORKSPACE_DELETE: self.workspaces.delete,
            Command.WORKSPACE_RENAME: self.workspaces.rename,
            Command.WORKSPACE_SWITCH: self.workspaces.switch_to,
            Command.WORKSPACE_GET_ALL: self.workspaces.list_all,
            Command.WORKSPACE_GET_ACTIVE: self.workspaces.get_active,
            Command.DOWNLOAD_GET_ALL: self.downloads.list,
            Command.DOWNLOAD_CANCEL: self.downloads.cancel,
            Command.DOWNLOAD_OPEN_FILE: self.downloads.open_file,
            Command.DOWNLOAD_OPEN_FOLDER: self.downloads.open_folder,
            Command.DOWNLOAD_CLEAR: self.clear_downloads,
            Command.SETTINGS_GET: self.settings.load,
            Command.SETTINGS_SET: self.set_settings,
            Command.SETTINGS_SELECT_DOWNLOAD_PATH: self.select_download_path,
            Command.SETTINGS_CLEAR_AUTOFILL: self.settings.clear_autofill,
        }

    # Lifecycle

    async def start(self, window: HostWindow | None) -> None:
        """Loads persisted state, hooks up downloads and materializes the active workspace."""
        await asyncio.to_thread(create_dir, self.data_dir)

        settings = await self.settings.load()
        self.downloads.download_path = settings.download_path
        for partition in PARTITION_IDS:
            self.downloads.attach(self.partitions.get_or_create(partition))

        await self.workspaces.load()
        self.panes.attach_window(window)
        self.workspaces.activate()

        self._started_at = time.monotonic()
        active = self.workspaces.get_active()
        self._session_log.session_started(
            self.data_dir,
            workspaces=len(self.workspaces.list_all()),
            active_workspace=active.name if active else "",
        )

    async def shutdown(self, window: HostWindow | None = None) -> None:
        """Persists window geometry and workspaces, then flushes pending saves."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

        if window is not None:
            await self.window_state.capture(window)
        await self.workspaces.save()
        await self.settings.update(active_workspace_id=self.workspaces.active_workspace_id)

        duration = time.monotonic() - self._started_at if self._started_at else 0.0
        self._session_log.session_stopped(
            duration, panes=len(self.panes), downloads_active=self.downloads.has_active()
        )
        self._event_log.close()

    async def dispatch(self, command: Command | str, *args: Any) -> Any:
        """Routes a presentation command to its handler and returns the handler's result."""
        try:
            handler = self._handlers[Command(command)]
        except ValueError as e:
            raise UnknownCommandError(f"Unknown command: {command!r}") from e
        result = handler(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    # Pane commands; every mutation is followed by an auto-save

    async def create_pane(
        self, options: CreatePaneOptions | dict | None = None
    ) -> PaneState | None:
        state = self.panes.create(_coerce(CreatePaneOptions, options))
        await self.workspaces.auto_save()
        return state

    async def close_pane(self, pane_id: str) -> bool:
        result = self.panes.close(pane_id)
        await self.workspaces.auto_save()
        return result

    async def update_pane(
        self, pane_id: str, options: UpdatePaneOptions | dict | None = None
    ) -> PaneState | None:
        state = self.panes.update(pane_id, _coerce(UpdatePaneOptions, options))
        await self.workspaces.auto_save()
        return state

    async def navigate_pane(self, pane_id: str, url: str) -> bool:
        result = self.panes.navigate(pane_id, url)
        await self.workspaces.auto_save()
        return result

    # Download and settings commands

    def clear_downloads(self) -> bool:
        self.downloads.clear()
        return True

    async def set_settings(self, changes: dict[str, Any]) -> AppSettings:
        updated = await self.settings.update(**changes)
        if "download_path" in changes or "downloadPath" in changes:
            self.downloads.download_path = updated.download_path
        return updated

    async def select_download_path(self) -> str | None:
        if self.shell is None:
            log.warning("No host shell available for the directory picker.")
            return None
        chosen = await self.settings.select_download_path(self.shell)
        if chosen:
            self.downloads.download_path = chosen
        return chosen

    # Background work

    def _on_pane_spawned(self, state: PaneState) -> None:
        log.debug(f"Pane {state.id} opened by content; scheduling auto-save.")
        self._schedule(self.workspaces.auto_save)

    def _schedule(self, job: Callable[[], Awaitable[Any]]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.debug("No running event loop; the change will be saved on shutdown.")
            return
        task = loop.create_task(job())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
