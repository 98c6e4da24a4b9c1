"""
Event journal for the application core.

Core events are named (`pane_created`, `session_started`, ...) and carry flat
key/value context. They always reach the standard logger; with a log directory
they are also appended to a JSON-lines file tagged with the session id.
"""

import json
import logging
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel


class StructuredLogger:
    """
    Writes named events to a `logging` logger and, optionally, a JSONL journal.

    Usage:
        journal = StructuredLogger("hydra_browser.events", log_dir=data_dir / "logs")
        journal.event(logging.INFO, "pane_created", pane_id="1700000000000-abc1234")
    """

    def __init__(self, name: str, log_dir: Path | None = None, enable_json: bool = True):
        self._logger = logging.getLogger(name)
        self.session_id = f"{int(time.time())}-{os.getpid()}"
        self.journal_path: Path | None = None
        self._journal = None

        if enable_json and log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            self.journal_path = log_dir / f"hydra_{datetime.now():%Y%m%d_%H%M%S}.jsonl"
            self._journal = open(self.journal_path, "a", encoding="utf-8")  # noqa: SIM115

    def event(self, level: int, name: str, **context: Any) -> None:
        if self._logger.isEnabledFor(level):
            details = " ".join(f"{key}={value}" for key, value in context.items())
            self._logger.log(level, f"[{name}] {details}".rstrip())

        if self._journal is None or self._journal.closed:
            return
        record = {
            "ts": datetime.now().isoformat(timespec="milliseconds"),
            "level": logging.getLevelName(level),
            "event": name,
            "session_id": self.session_id,
            **context,
        }
        try:
            self._journal.write(json.dumps(record, default=str) + "\n")
            self._journal.flush()
        except (OSError, ValueError) as e:
            self._logger.warning(f"Could not write to the event journal: {e}")

    def close(self) -> None:
        if self._journal is not None and not self._journal.closed:
            self._journal.close()


class NotificationLogger:
    """
    Journals every hub notification as a structured event.

    Subscribe an instance to a `NotificationHub`; the channel name becomes the
    event name (e.g. 'pane:stateUpdated' -> 'pane_state_updated').
    """

    # Fields worth keeping per payload type; full payloads are too noisy
    _PANE_FIELDS = ("id", "url", "partition", "scale", "console_state")
    _DOWNLOAD_FIELDS = ("id", "filename", "state", "received_bytes", "total_bytes")

    _LEVELS = {
        "download_failed": logging.WARNING,
        "download_progress": logging.DEBUG,
    }

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def __call__(self, notification: Any, payload: Any) -> None:
        channel = str(getattr(notification, "value", notification)).replace(":", "_")
        name = "".join(f"_{c.lower()}" if c.isupper() else c for c in channel)
        self.logger.event(self._LEVELS.get(name, logging.INFO), name, **self._summarize(payload))

    def _summarize(self, payload: Any) -> dict[str, Any]:
        if payload is None:
            return {}
        if isinstance(payload, str):
            return {"pane_id": payload}
        if isinstance(payload, BaseModel):
            data = payload.model_dump(mode="json")
            fields = self._DOWNLOAD_FIELDS if "filename" in data else self._PANE_FIELDS
            return {key: data[key] for key in fields if key in data}
        return {"payload": repr(payload)}


class SessionLogger:
    """Records application start and stop."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def session_started(self, data_dir: Path, workspaces: int, active_workspace: str):
        self.logger.event(
            logging.INFO,
            "session_started",
            data_dir=str(data_dir),
            workspaces=workspaces,
            active_workspace=active_workspace,
        )

    def session_stopped(self, duration_s: float, panes: int, downloads_active: bool):
        self.logger.event(
            logging.INFO,
            "session_stopped",
            duration_s=round(duration_s, 2),
            panes=panes,
            downloads_active=downloads_active,
        )


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, NotificationLogger, SessionLogger]:
    """Returns (journal, notification_logger, session_logger) sharing one journal."""
    journal = StructuredLogger("hydra_browser.events", log_dir=log_dir, enable_json=enable_json)
    return journal, NotificationLogger(journal), SessionLogger(journal)
