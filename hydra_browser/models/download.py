"""
Pydantic model for a tracked download.
"""

from enum import Enum

from .base import CamelModel


class DownloadState(str, Enum):
    PROGRESSING = "progressing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    INTERRUPTED = "interrupted"


class DownloadItem(CamelModel):
    """A single transfer; frozen once its state leaves PROGRESSING."""

    id: str
    filename: str
    save_path: str
    url: str
    total_bytes: int = 0
    received_bytes: int = 0
    state: DownloadState = DownloadState.PROGRESSING
    start_time: int
    pane_id: str | None = None
    seen: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.state is not DownloadState.PROGRESSING
