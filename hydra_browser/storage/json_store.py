"""
Best-effort JSON document persistence.

A missing, unreadable or corrupt document never takes the application down:
reads fall back to a caller-supplied default and writes report failure.
"""

import asyncio
import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

import aiofiles

log = logging.getLogger(__name__)

WORKSPACES_FILE = "workspaces.json"
WINDOW_STATE_FILE = "window-state.json"
SETTINGS_FILE = "settings.json"


class JsonDocument:
    """
    One JSON object stored in one file.

    Writes to a document are serialized and land atomically: the payload goes
    to a sibling `.tmp` file which then replaces the real path, so a reader
    only ever sees a complete document.
    """

    def __init__(self, path: Path):
        self.path = path
        self._lock = asyncio.Lock()

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(f"{self.path.name}.tmp")

    async def load(self, default: Any = None) -> Any:
        """
        Reads and parses the document. Returns `default` if the file is
        missing, unreadable or not valid JSON.
        """
        exists = await asyncio.to_thread(self.path.is_file)
        if not exists:
            return default

        try:
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                content = await f.read()
            return json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            log.error(f"Failed to read {self.path}: {e}")
            return default

    async def save(self, data: Any) -> bool:
        """Writes the document with 2-space indentation. Returns False on failure."""
        try:
            serialized = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            log.error(f"Failed to serialize {self.path.name}: {e}")
            return False

        async with self._lock:
            temp_path = self.temp_path
            try:
                await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)
                async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                    await f.write(serialized)
                await asyncio.to_thread(os.replace, temp_path, self.path)
                return True
            except OSError as e:
                log.error(f"Failed to write {self.path}: {e}")
                with contextlib.suppress(OSError):
                    await asyncio.to_thread(temp_path.unlink, missing_ok=True)
                return False

    def exists(self) -> bool:
        return self.path.is_file()

    async def delete(self) -> bool:
        """Removes the document so the next load yields the default."""
        async with self._lock:
            try:
                await asyncio.to_thread(self.path.unlink, missing_ok=True)
                return True
            except OSError as e:
                log.error(f"Failed to delete {self.path}: {e}")
                return False
