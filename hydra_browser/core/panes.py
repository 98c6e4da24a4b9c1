"""
Pane lifecycle, ordering, focus and device emulation.

The `PaneOrchestrator` is the only owner of live panes. Commands arrive from the
presentation layer; content events arrive from the host through a per-pane
listener. Both may interleave in any order, so every handler looks the pane up
again and treats a missing pane as a no-op.
"""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from hydra_browser.exceptions import HostError
from hydra_browser.host.base import ContentHandle, HostView, HostWindow
from hydra_browser.models.pane import (
    DEFAULT_PARTITION,
    DEFAULT_SCALE,
    DEFAULT_TITLE,
    DEFAULT_URL,
    Bounds,
    ConsoleLevel,
    ConsoleState,
    CreatePaneOptions,
    DeviceEmulation,
    PaneConfig,
    PaneState,
    UpdatePaneOptions,
    default_resolution,
)
from hydra_browser.utils.ids import generate_id

from .events import Notification, NotificationHub
from .partitions import PartitionRegistry

log = logging.getLogger(__name__)


def next_console_state(current: ConsoleState, level: int) -> ConsoleState:
    """
    Applies one console message to a pane's console state.

    Errors always win; a warning never downgrades an error; verbose, info and
    unknown levels leave the state alone.
    """
    if level == ConsoleLevel.ERROR:
        return ConsoleState.ERROR
    if level == ConsoleLevel.WARNING and current is not ConsoleState.ERROR:
        return ConsoleState.WARNING
    return current


@dataclass
class LivePane:
    config: PaneConfig
    view: HostView
    console_state: ConsoleState = ConsoleState.NORMAL

    @property
    def content(self) -> ContentHandle:
        return self.view.content


class PaneCollection:
    """
    Panes in visual order.

    The id sequence and the id->pane map are only ever changed together, here,
    so their lengths and membership always agree.
    """

    def __init__(self) -> None:
        self._order: list[str] = []
        self._panes: dict[str, LivePane] = {}

    def insert(self, pane_id: str, pane: LivePane, index: int | None = None) -> None:
        if pane_id in self._panes:
            raise KeyError(f"Pane {pane_id} is already present.")
        if index is None or index >= len(self._order):
            self._order.append(pane_id)
        else:
            self._order.insert(max(index, 0), pane_id)
        self._panes[pane_id] = pane

    def remove(self, pane_id: str) -> tuple[LivePane, int] | None:
        """Removes a pane, returning it with the order index it occupied."""
        pane = self._panes.pop(pane_id, None)
        if pane is None:
            return None
        index = self._order.index(pane_id)
        del self._order[index]
        return pane, index

    def get(self, pane_id: str) -> LivePane | None:
        return self._panes.get(pane_id)

    def index_of(self, pane_id: str) -> int:
        return self._order.index(pane_id) if pane_id in self._panes else -1

    def id_at(self, index: int) -> str | None:
        if 0 <= index < len(self._order):
            return self._order[index]
        return None

    def ids(self) -> list[str]:
        return list(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, pane_id: object) -> bool:
        return pane_id in self._panes

    def __iter__(self) -> Iterator[tuple[str, LivePane]]:
        for pane_id in list(self._order):
            yield pane_id, self._panes[pane_id]


class _PaneListener:
    """Routes host content events for one pane back into the orchestrator."""

    def __init__(self, orchestrator: "PaneOrchestrator", pane_id: str):
        self._orchestrator = orchestrator
        self.pane_id = pane_id

    def on_title_updated(self, title: str) -> None:
        self._orchestrator._publish_state(self.pane_id)

    def on_loading_changed(self, is_loading: bool) -> None:
        self._orchestrator._publish_state(self.pane_id)

    def on_navigation_started(self, url: str, is_in_page: bool, is_main_frame: bool) -> None:
        self._orchestrator._handle_navigation_started(self.pane_id, is_in_page, is_main_frame)

    def on_navigated(self, url: str) -> None:
        self._orchestrator._handle_navigated(self.pane_id, url, in_page=False)

    def on_navigated_in_page(self, url: str) -> None:
        self._orchestrator._handle_navigated(self.pane_id, url, in_page=True)

    def on_console_message(self, level: int, message: str) -> None:
        self._orchestrator._handle_console_message(self.pane_id, level)

    def on_focus(self) -> None:
        self._orchestrator._handle_focus(self.pane_id)

    def on_new_window(self, url: str) -> bool:
        return self._orchestrator._handle_new_window(self.pane_id, url)


class PaneOrchestrator:
    """Owns every live pane, their visual order and the focused pane."""

    def __init__(
        self,
        partitions: PartitionRegistry,
        hub: NotificationHub,
        window: HostWindow | None = None,
        on_spawn: Callable[[PaneState], None] | None = None,
    ):
        """
        Args:
            partitions: Registry resolving partition letters to storage contexts.
            hub: Where pane notifications are published.
            window: Host window to mount views into; may be attached later.
            on_spawn: Called after a pane is created from a content new-window
                request, i.e. without a presentation command.
        """
        self._partitions = partitions
        self._hub = hub
        self._window = window
        self._panes = PaneCollection()
        self._focused_pane_id: str | None = None
        self.on_spawn = on_spawn

    def attach_window(self, window: HostWindow | None) -> None:
        self._window = window

    @property
    def focused_pane_id(self) -> str | None:
        return self._focused_pane_id

    @property
    def pane_ids(self) -> list[str]:
        return self._panes.ids()

    def __len__(self) -> int:
        return len(self._panes)

    def __contains__(self, pane_id: object) -> bool:
        return pane_id in self._panes

    def _new_id(self) -> str:
        pane_id = generate_id()
        while pane_id in self._panes:
            pane_id = generate_id()
        return pane_id

    # Commands

    def create(self, options: CreatePaneOptions | None = None) -> PaneState | None:
        """
        Creates a pane, inserted after `options.insert_after_pane_id` when that
        pane exists and at the tail otherwise. The new pane takes focus.

        Returns:
            The new pane's state, or None when there is no usable host window.
        """
        options = options or CreatePaneOptions()
        index = None
        if options.insert_after_pane_id is not None:
            anchor = self._panes.index_of(options.insert_after_pane_id)
            if anchor >= 0:
                index = anchor + 1
        return self._create_at(options, index)

    def _create_at(self, options: CreatePaneOptions, index: int | None) -> PaneState | None:
        window = self._window
        if window is None or window.is_destroyed():
            log.error("Cannot create a pane: no host window is attached.")
            return None

        partition = options.partition or DEFAULT_PARTITION
        context = self._partitions.get_or_create(partition)
        pane_id = self._new_id()
        config = PaneConfig(
            id=pane_id,
            url=options.url or DEFAULT_URL,
            resolution=(
                options.resolution.model_copy()
                if options.resolution
                else default_resolution()
            ),
            scale=options.scale if options.scale is not None else DEFAULT_SCALE,
            partition=partition,
        )

        try:
            view = window.create_view(context, _PaneListener(self, pane_id))
        except HostError as e:
            log.error(f"Host could not create a view on partition {partition}: {e}")
            return None

        self._apply_device_emulation(view, config)
        self._panes.insert(pane_id, LivePane(config=config, view=view), index)
        window.add_view(view)

        if config.url and config.url != DEFAULT_URL:
            view.content.load_url(config.url)

        self.set_focus(pane_id)
        state = self.get_state(pane_id)
        self._hub.publish(Notification.PANE_CREATED, state)
        log.debug(f"Created pane {pane_id} on partition {partition} at {config.url}")
        return state

    def close(self, pane_id: str) -> bool:
        removed = self._panes.remove(pane_id)
        if removed is None:
            return False
        pane, index = removed
        self._teardown(pane)

        if self._focused_pane_id == pane_id:
            self._reassign_focus(index)

        self._hub.publish(Notification.PANE_CLOSED, pane_id)
        log.debug(f"Closed pane {pane_id}")
        return True

    def close_all(self) -> None:
        for pane_id in self._panes.ids():
            self.close(pane_id)

    def update(self, pane_id: str, options: UpdatePaneOptions | None = None) -> PaneState | None:
        """
        Applies new resolution/scale in place, or moves the pane to another
        partition. A partition change rebuilds the pane at the same position and
        URL under a new id.
        """
        pane = self._panes.get(pane_id)
        if pane is None:
            return None
        options = options or UpdatePaneOptions()

        if options.partition and options.partition != pane.config.partition:
            return self._recreate_on_partition(pane_id, pane, options)

        if options.resolution is not None:
            pane.config.resolution = options.resolution.model_copy()
        if options.scale is not None:
            pane.config.scale = options.scale

        self._apply_device_emulation(pane.view, pane.config)
        state = self.get_state(pane_id)
        self._hub.publish(Notification.PANE_STATE_UPDATED, state)
        return state

    def _recreate_on_partition(
        self, pane_id: str, pane: LivePane, options: UpdatePaneOptions
    ) -> PaneState | None:
        current_url = pane.content.get_url() or pane.config.url
        _, index = self._panes.remove(pane_id)
        self._teardown(pane)
        was_focused = self._focused_pane_id == pane_id
        if was_focused:
            self._focused_pane_id = None
        self._hub.publish(Notification.PANE_CLOSED, pane_id)

        state = self._create_at(
            CreatePaneOptions(
                url=current_url,
                resolution=options.resolution or pane.config.resolution,
                scale=options.scale if options.scale is not None else pane.config.scale,
                partition=options.partition,
            ),
            index,
        )
        if state is None:
            # The old view is already gone; there is nothing to roll back to.
            log.error(
                f"Pane {pane_id} was lost while moving to partition {options.partition}."
            )
            if was_focused:
                self._reassign_focus(index)
            return None

        log.info(
            f"Moved pane {pane_id} from partition {pane.config.partition} to "
            f"{options.partition} as {state.id}."
        )
        return state

    def navigate(self, pane_id: str, url: str) -> bool:
        pane = self._panes.get(pane_id)
        if pane is None:
            return False
        pane.config.url = url
        pane.content.load_url(url)
        return True

    def go_back(self, pane_id: str) -> bool:
        pane = self._panes.get(pane_id)
        if pane is None or not pane.content.can_go_back():
            return False
        pane.content.go_back()
        return True

    def go_forward(self, pane_id: str) -> bool:
        pane = self._panes.get(pane_id)
        if pane is None or not pane.content.can_go_forward():
            return False
        pane.content.go_forward()
        return True

    def reload(self, pane_id: str) -> bool:
        pane = self._panes.get(pane_id)
        if pane is None:
            return False
        pane.content.reload()
        return True

    def toggle_dev_tools(self, pane_id: str) -> bool:
        pane = self._panes.get(pane_id)
        if pane is None:
            return False
        if pane.content.is_dev_tools_opened():
            pane.content.close_dev_tools()
        else:
            pane.content.open_dev_tools(detached=True)
        return True

    def set_focus(self, pane_id: str) -> bool:
        pane = self._panes.get(pane_id)
        if pane is None:
            return False
        self._focused_pane_id = pane_id
        pane.content.focus()
        self._hub.publish(Notification.PANE_FOCUS_CHANGED, pane_id)
        return True

    # Queries

    def get_state(self, pane_id: str) -> PaneState | None:
        pane = self._panes.get(pane_id)
        if pane is None:
            return None
        content = pane.content
        return PaneState(
            **pane.config.model_dump(),
            title=content.get_title() or DEFAULT_TITLE,
            console_state=pane.console_state,
            is_loading=content.is_loading(),
            can_go_back=content.can_go_back(),
            can_go_forward=content.can_go_forward(),
        )

    def get_all_states(self) -> list[PaneState]:
        return [self.get_state(pane_id) for pane_id, _ in self._panes]

    def get_configs(self) -> list[PaneConfig]:
        """Persistable configuration of every pane, with the live URL as the URL of record."""
        return [
            pane.config.model_copy(
                update={"url": pane.content.get_url() or pane.config.url}, deep=True
            )
            for _, pane in self._panes
        ]

    def load_panes(self, configs: list[PaneConfig]) -> None:
        """Replaces every live pane with panes built from `configs`, in order."""
        self.close_all()
        for config in configs:
            self.create(
                CreatePaneOptions(
                    url=config.url,
                    resolution=config.resolution,
                    scale=config.scale,
                    partition=config.partition,
                )
            )

    def pane_id_for_content(self, content: object) -> str | None:
        """Finds the pane hosting `content`, for attributing downloads."""
        if content is None:
            return None
        for pane_id, pane in self._panes:
            if pane.content is content:
                return pane_id
        return None

    def get_view_bounds(self, pane_id: str) -> Bounds | None:
        """Display size of a pane: its resolution scaled by its scale percent."""
        pane = self._panes.get(pane_id)
        if pane is None:
            return None
        resolution, scale = pane.config.resolution, pane.config.scale
        return Bounds(
            x=0,
            y=0,
            width=round(resolution.width * scale / 100),
            height=round(resolution.height * scale / 100),
        )

    def set_view_bounds(self, pane_id: str, bounds: Bounds) -> bool:
        pane = self._panes.get(pane_id)
        if pane is None:
            return False
        pane.view.set_bounds(bounds)
        return True

    # Internals

    def _teardown(self, pane: LivePane) -> None:
        window = self._window
        if window is not None and not window.is_destroyed():
            window.remove_view(pane.view)
        pane.content.close()

    def _reassign_focus(self, index: int) -> None:
        """Focuses the pane now at `index`, else the one before it, else nothing."""
        if len(self._panes) == 0:
            self._focused_pane_id = None
            self._hub.publish(Notification.PANE_FOCUS_CHANGED, None)
            return
        self.set_focus(self._panes.id_at(min(index, len(self._panes) - 1)))

    @staticmethod
    def _apply_device_emulation(view: HostView, config: PaneConfig) -> None:
        view.content.enable_device_emulation(
            DeviceEmulation.for_config(config.resolution, config.scale)
        )

    def _publish_state(self, pane_id: str) -> None:
        state = self.get_state(pane_id)
        if state is not None:
            self._hub.publish(Notification.PANE_STATE_UPDATED, state)

    def _handle_navigation_started(
        self, pane_id: str, is_in_page: bool, is_main_frame: bool
    ) -> None:
        pane = self._panes.get(pane_id)
        if pane is None or not is_main_frame or is_in_page:
            return
        pane.console_state = ConsoleState.NORMAL
        self._publish_state(pane_id)

    def _handle_navigated(self, pane_id: str, url: str, in_page: bool) -> None:
        pane = self._panes.get(pane_id)
        if pane is None:
            return
        pane.config.url = pane.content.get_url() or url
        if not in_page:
            pane.console_state = ConsoleState.NORMAL
        self._publish_state(pane_id)

    def _handle_console_message(self, pane_id: str, level: int) -> None:
        pane = self._panes.get(pane_id)
        if pane is None:
            return
        new_state = next_console_state(pane.console_state, level)
        if new_state is not pane.console_state:
            pane.console_state = new_state
            self._publish_state(pane_id)

    def _handle_focus(self, pane_id: str) -> None:
        if pane_id not in self._panes or self._focused_pane_id == pane_id:
            return
        self._focused_pane_id = pane_id
        self._hub.publish(Notification.PANE_FOCUS_CHANGED, pane_id)

    def _handle_new_window(self, pane_id: str, url: str) -> bool:
        pane = self._panes.get(pane_id)
        if pane is not None:
            state = self.create(
                CreatePaneOptions(
                    url=url,
                    resolution=pane.config.resolution,
                    scale=pane.config.scale,
                    partition=pane.config.partition,
                    insert_after_pane_id=pane_id,
                )
            )
            if state is not None and self.on_spawn is not None:
                self.on_spawn(state)
        # The host never opens a native window of its own.
        return False
