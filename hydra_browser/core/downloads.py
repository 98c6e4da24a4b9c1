"""
Tracks every transfer started from any partition, from start to a terminal state.
"""

import logging
import time
from collections.abc import Callable
from pathlib import Path

from hydra_browser.host.base import HostDownload, HostShell, StorageContext
from hydra_browser.models.download import DownloadItem, DownloadState
from hydra_browser.utils.ids import generate_id
from hydra_browser.utils.path import get_default_download_dir, unique_save_path

from .events import Notification, NotificationHub

log = logging.getLogger(__name__)

# Host terminal outcomes; anything unrecognised is treated as an interruption.
_TERMINAL_STATES = {
    "completed": DownloadState.COMPLETED,
    "cancelled": DownloadState.CANCELLED,
    "interrupted": DownloadState.INTERRUPTED,
}


class DownloadTracker:
    """
    Observes download events from storage contexts and keeps one record per
    transfer.

    Records stay listed after they finish; only the host handle is dropped.
    Closing the pane that started a download does not affect it.
    """

    def __init__(
        self,
        hub: NotificationHub,
        download_path: Path | str | None = None,
        shell: HostShell | None = None,
        origin_resolver: Callable[[object], str | None] | None = None,
    ):
        """
        Args:
            hub: Where download notifications are published.
            download_path: Directory new files are saved into.
            shell: Host shell used to open files and reveal them in a folder.
            origin_resolver: Maps the host's originating content handle to a
                pane id.
        """
        self._hub = hub
        self._download_path = Path(download_path or get_default_download_dir())
        self._shell = shell
        self._origin_resolver = origin_resolver
        self._downloads: dict[str, DownloadItem] = {}
        self._host_items: dict[str, HostDownload] = {}

    @property
    def download_path(self) -> Path:
        return self._download_path

    @download_path.setter
    def download_path(self, value: Path | str) -> None:
        self._download_path = Path(value)
        log.debug(f"Download directory set to {self._download_path}")

    def attach(self, context: StorageContext) -> None:
        """Subscribes to one storage context's download events."""
        context.on_download(self._handle_download)

    def _handle_download(self, item: HostDownload, origin: object = None) -> None:
        download_id = generate_id()
        while download_id in self._downloads:
            download_id = generate_id()

        save_path = unique_save_path(self._download_path, item.filename)
        item.set_save_path(str(save_path))

        pane_id = self._origin_resolver(origin) if self._origin_resolver else None
        download = DownloadItem(
            id=download_id,
            filename=item.filename,
            save_path=str(save_path),
            url=item.url,
            total_bytes=item.get_total_bytes(),
            received_bytes=0,
            state=DownloadState.PROGRESSING,
            start_time=int(time.time() * 1000),
            pane_id=pane_id,
        )
        self._downloads[download_id] = download
        self._host_items[download_id] = item

        item.on_updated(lambda state: self._handle_updated(download_id, item, state))
        item.on_done(lambda state: self._handle_done(download_id, state))

        log.info(f"Download started: '{download.filename}' -> {save_path}")
        self._hub.publish(Notification.DOWNLOAD_STARTED, download)

    def _handle_updated(self, download_id: str, item: HostDownload, state: str) -> None:
        download = self._downloads.get(download_id)
        if download is None or download.is_terminal:
            return

        download.received_bytes = item.get_received_bytes()
        download.total_bytes = item.get_total_bytes()

        if state == "interrupted":
            download.state = DownloadState.INTERRUPTED
            log.warning(f"Download interrupted: '{download.filename}'")
            self._hub.publish(Notification.DOWNLOAD_FAILED, download)
        else:
            self._hub.publish(Notification.DOWNLOAD_PROGRESS, download)

    def _handle_done(self, download_id: str, state: str) -> None:
        self._host_items.pop(download_id, None)
        download = self._downloads.get(download_id)
        if download is None or download.is_terminal:
            return

        download.state = _TERMINAL_STATES.get(state, DownloadState.INTERRUPTED)
        if download.state is DownloadState.COMPLETED:
            download.received_bytes = download.total_bytes
            log.info(f"Download completed: '{download.filename}'")
            self._hub.publish(Notification.DOWNLOAD_COMPLETED, download)
        else:
            log.info(f"Download {download.state.value}: '{download.filename}'")
            self._hub.publish(Notification.DOWNLOAD_FAILED, download)

    def get(self, download_id: str) -> DownloadItem | None:
        return self._downloads.get(download_id)

    def list(self) -> list[DownloadItem]:
        """All records, most recently started first."""
        return sorted(self._downloads.values(), key=lambda d: d.start_time, reverse=True)

    def cancel(self, download_id: str) -> bool:
        download = self._downloads.get(download_id)
        item = self._host_items.get(download_id)
        if download is None or download.is_terminal or item is None:
            return False
        item.cancel()
        return True

    def open_file(self, download_id: str) -> bool:
        download = self._downloads.get(download_id)
        if download is None or download.state is not DownloadState.COMPLETED:
            return False
        if self._shell is None:
            log.warning("No host shell available to open downloaded files.")
            return False
        self._shell.open_path(download.save_path)
        return True

    def open_folder(self, download_id: str) -> bool:
        download = self._downloads.get(download_id)
        if download is None:
            return False
        if self._shell is None:
            log.warning("No host shell available to reveal downloaded files.")
            return False
        self._shell.show_item_in_folder(download.save_path)
        return True

    def clear(self) -> None:
        """Drops every finished record; transfers still in progress are kept."""
        finished = [d_id for d_id, d in self._downloads.items() if d.is_terminal]
        for download_id in finished:
            del self._downloads[download_id]
        log.debug(f"Cleared {len(finished)} finished downloads.")

    def has_active(self) -> bool:
        return any(not d.is_terminal for d in self._downloads.values())

    def has_unseen_completed(self) -> bool:
        return any(
            d.state is DownloadState.COMPLETED and not d.seen
            for d in self._downloads.values()
        )

    def mark_all_seen(self) -> None:
        for download in self._downloads.values():
            if download.state is DownloadState.COMPLETED:
                download.seen = True
