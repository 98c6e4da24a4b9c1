"""
Manages loading, validation, and migration of the settings document.
"""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from hydra_browser.exceptions import HydraError
from hydra_browser.host.base import HostShell
from hydra_browser.models.settings import AppSettings

from .json_store import JsonDocument

log = logging.getLogger(__name__)

AUTOFILL_DIR_NAME = "autofill"


class SettingsManager:
    """Handles all operations related to `settings.json`."""

    def __init__(self, document: JsonDocument, data_dir: Path):
        self.document = document
        self.data_dir = data_dir

    async def load(self) -> AppSettings:
        """
        Loads and validates the settings document.

        Missing or corrupt documents yield defaults. Keys added since the file
        was written are filled with their defaults and written back.
        """
        data = await self.document.load(None)
        if not isinstance(data, dict):
            if data is not None:
                log.warning(f"Settings in {self.document.path} are not an object; using defaults.")
            return AppSettings()

        try:
            settings = AppSettings.model_validate(data)
        except ValidationError as e:
            log.error(f"Settings validation failed, using defaults:\n{e}")
            return AppSettings()

        if await self._migrate_if_needed(data, settings):
            log.info("[yellow]Settings file was updated with new default values.[/yellow]")
        return settings

    async def save(self, settings: AppSettings) -> bool:
        return await self.document.save(settings.to_document())

    async def update(self, **changes: Any) -> AppSettings:
        """
        Merges `changes` (snake_case or camelCase keys) into the stored settings
        and persists the result.

        Raises:
            HydraError: If the merged settings do not validate.
        """
        current = await self.load()
        merged = current.model_dump()
        merged.update(
            {self._field_name(key): value for key, value in changes.items()}
        )
        try:
            updated = AppSettings.model_validate(merged)
        except ValidationError as e:
            raise HydraError(f"Invalid settings:\n{e}") from e
        await self.save(updated)
        return updated

    @staticmethod
    def _field_name(key: str) -> str:
        """Maps a snake_case or camelCase settings key to its field name."""
        if key in AppSettings.model_fields:
            return key
        for name, field in AppSettings.model_fields.items():
            if field.alias == key:
                return name
        raise HydraError(f"Unknown setting: {key!r}")

    async def select_download_path(self, shell: HostShell) -> str | None:
        """Asks the host for a directory; persists and returns it unless cancelled."""
        chosen = await shell.pick_directory("Select Download Folder")
        if not chosen:
            return None
        await self.update(download_path=chosen)
        return chosen

    async def clear_autofill(self) -> bool:
        """Removes the autofill data directory, if present."""
        autofill_dir = self.data_dir / AUTOFILL_DIR_NAME
        if not autofill_dir.exists():
            return True
        try:
            await asyncio.to_thread(shutil.rmtree, autofill_dir)
            log.info(f"Removed autofill data at {autofill_dir}")
            return True
        except OSError as e:
            log.error(f"Failed to clear autofill data: {e}")
            return False

    async def _migrate_if_needed(self, raw: dict[str, Any], settings: AppSettings) -> bool:
        """Writes defaults for any expected key missing from the raw document."""
        missing = AppSettings.get_document_keys() - raw.keys()
        if not missing:
            return False
        for key in sorted(missing):
            log.debug(f"Migrating settings: added missing key '{key}'.")
        return await self.save(settings)
