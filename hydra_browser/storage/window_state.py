"""
Persists and restores the host window's geometry.
"""

import logging
from typing import Any

from pydantic import ValidationError

from hydra_browser.host.base import HostWindow
from hydra_browser.models.pane import Bounds
from hydra_browser.models.settings import (
    WINDOW_DEFAULT_HEIGHT,
    WINDOW_DEFAULT_WIDTH,
    WINDOW_MIN_HEIGHT,
    WINDOW_MIN_WIDTH,
    WindowState,
)

from .json_store import JsonDocument

log = logging.getLogger(__name__)


class WindowStateStore:
    def __init__(self, document: JsonDocument):
        self.document = document

    async def load(self) -> WindowState | None:
        """Returns the last persisted window state, or None if absent or invalid."""
        data: Any = await self.document.load(None)
        if data is None:
            return None
        try:
            return WindowState.model_validate(data)
        except ValidationError as e:
            log.warning(f"Ignoring invalid window state in {self.document.path}: {e}")
            return None

    async def save(self, state: WindowState) -> bool:
        return await self.document.save(state.to_document())

    async def initial_bounds(self) -> WindowState:
        """Geometry to open the window with, clamped to the minimum window size."""
        state = await self.load() or WindowState()
        state = state.model_copy(
            update={
                "width": max(state.width, WINDOW_MIN_WIDTH),
                "height": max(state.height, WINDOW_MIN_HEIGHT),
            }
        )
        return state

    async def capture(self, window: HostWindow) -> WindowState:
        """
        Snapshots the window on shutdown and persists it.

        A minimized window is restored first so its real geometry is read. A
        maximized window keeps the last persisted non-maximized bounds, so
        un-maximizing later lands somewhere sensible.
        """
        if window.is_minimized():
            window.restore()

        if window.is_maximized():
            last = await self.load()
            state = WindowState(
                x=last.x if last else None,
                y=last.y if last else None,
                width=last.width if last else WINDOW_DEFAULT_WIDTH,
                height=last.height if last else WINDOW_DEFAULT_HEIGHT,
                is_maximized=True,
            )
        else:
            bounds: Bounds = window.get_bounds()
            state = WindowState(
                x=bounds.x,
                y=bounds.y,
                width=bounds.width,
                height=bounds.height,
                is_maximized=False,
            )

        await self.save(state)
        return state
