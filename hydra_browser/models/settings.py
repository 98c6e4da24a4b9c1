"""
Pydantic models for application settings and window state.
Provides validation for everything read back from disk.
"""

from typing import Literal

from pydantic import Field, field_validator

from hydra_browser.utils.path import get_default_download_dir

from .base import CamelModel

WINDOW_DEFAULT_WIDTH = 1400
WINDOW_DEFAULT_HEIGHT = 900
WINDOW_MIN_WIDTH = 800
WINDOW_MIN_HEIGHT = 600

AppTheme = Literal["light", "dark", "system"]
AppLanguage = Literal["ja", "en"]


class AppSettings(CamelModel):
    """A validated settings model, persisted as `settings.json`."""

    download_path: str = Field(default_factory=lambda: str(get_default_download_dir()))
    active_workspace_id: str = ""
    theme: AppTheme = "system"
    language: AppLanguage = "en"

    @field_validator("download_path")
    @classmethod
    def validate_download_path(cls, v: str) -> str:
        """An empty path falls back to the platform download directory."""
        return v or str(get_default_download_dir())

    @classmethod
    def get_document_keys(cls) -> set[str]:
        """Returns the camelCase keys expected in the settings document."""
        return {field.alias or name for name, field in cls.model_fields.items()}


class WindowState(CamelModel):
    """Host window geometry, persisted as `window-state.json`."""

    x: int | None = None
    y: int | None = None
    width: int = Field(default=WINDOW_DEFAULT_WIDTH, gt=0)
    height: int = Field(default=WINDOW_DEFAULT_HEIGHT, gt=0)
    is_maximized: bool = False
