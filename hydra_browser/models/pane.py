"""
Pydantic models for panes, their options, and device emulation.
"""

import string
from enum import Enum, IntEnum

from pydantic import Field, field_validator

from .base import CamelModel

# Partition identifiers (A-Z), each mapping to one persistent storage namespace
PARTITION_IDS: tuple[str, ...] = tuple(string.ascii_uppercase)
SESSION_PARTITION_PREFIX = "persist:partition-"

MIN_SCALE = 10
MAX_SCALE = 200

DEFAULT_URL = "about:blank"
DEFAULT_PARTITION = "A"
DEFAULT_SCALE = 100
DEFAULT_TITLE = "New Tab"


def clamp_scale(value: float) -> int:
    """Clamps a display scale (percent) into [MIN_SCALE, MAX_SCALE]."""
    return int(round(max(MIN_SCALE, min(MAX_SCALE, float(value)))))


def check_partition(value: str) -> str:
    if value not in PARTITION_IDS:
        raise ValueError(f"Partition must be a single letter A-Z, got {value!r}.")
    return value


class ConsoleState(str, Enum):
    """Worst console severity seen since the last main-frame navigation."""

    NORMAL = "normal"
    WARNING = "warning"
    ERROR = "error"


class ConsoleLevel(IntEnum):
    """Console message severity as reported by the host."""

    VERBOSE = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


class ResolutionPreset(CamelModel):
    category: str
    device_name: str
    width: int
    height: int


RESOLUTION_PRESETS: tuple[ResolutionPreset, ...] = tuple(
    ResolutionPreset(category=category, device_name=name, width=w, height=h)
    for category, name, w, h in (
        ("Mobile", "iPhone SE", 375, 667),
        ("Mobile", "iPhone 14", 390, 844),
        ("Mobile", "iPhone 14 Pro Max", 430, 932),
        ("Mobile", "Pixel 7", 412, 915),
        ("Mobile", "Galaxy S20", 360, 800),
        ("Tablet", "iPad Mini", 768, 1024),
        ("Tablet", "iPad Air", 820, 1180),
        ("Tablet", "iPad Pro 12.9", 1024, 1366),
        ("Desktop", "Laptop", 1366, 768),
        ("Desktop", "Desktop", 1920, 1080),
        ("Desktop", "Desktop Large", 2560, 1440),
    )
)


class PaneResolution(CamelModel):
    """Emulated viewport size, optionally named after a preset."""

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    preset_name: str | None = None

    @classmethod
    def from_preset(cls, device_name: str) -> "PaneResolution":
        for preset in RESOLUTION_PRESETS:
            if preset.device_name == device_name:
                return cls(
                    width=preset.width,
                    height=preset.height,
                    preset_name=preset.device_name,
                )
        raise ValueError(f"Unknown resolution preset: {device_name!r}")


def default_resolution() -> PaneResolution:
    return PaneResolution(width=1366, height=768, preset_name="Laptop")


class PaneConfig(CamelModel):
    """The persistable part of a pane."""

    id: str
    url: str = DEFAULT_URL
    resolution: PaneResolution = Field(default_factory=default_resolution)
    scale: int = DEFAULT_SCALE
    partition: str = DEFAULT_PARTITION

    @field_validator("scale", mode="before")
    @classmethod
    def validate_scale(cls, v: float) -> int:
        return clamp_scale(v)

    @field_validator("partition")
    @classmethod
    def validate_partition(cls, v: str) -> str:
        return check_partition(v)


class PaneState(PaneConfig):
    """Read-only projection of a live pane, including host-derived fields."""

    title: str = DEFAULT_TITLE
    console_state: ConsoleState = ConsoleState.NORMAL
    is_loading: bool = False
    can_go_back: bool = False
    can_go_forward: bool = False


class CreatePaneOptions(CamelModel):
    """Options accepted by the `pane:create` command. Unset fields use defaults."""

    url: str | None = None
    resolution: PaneResolution | None = None
    scale: int | None = None
    partition: str | None = None
    insert_after_pane_id: str | None = None

    @field_validator("scale", mode="before")
    @classmethod
    def validate_scale(cls, v: float | None) -> int | None:
        return None if v is None else clamp_scale(v)

    @field_validator("partition")
    @classmethod
    def validate_partition(cls, v: str | None) -> str | None:
        return None if v is None else check_partition(v)


class UpdatePaneOptions(CamelModel):
    """Options accepted by the `pane:update` command."""

    resolution: PaneResolution | None = None
    scale: int | None = None
    partition: str | None = None

    @field_validator("scale", mode="before")
    @classmethod
    def validate_scale(cls, v: float | None) -> int | None:
        return None if v is None else clamp_scale(v)

    @field_validator("partition")
    @classmethod
    def validate_partition(cls, v: str | None) -> str | None:
        return None if v is None else check_partition(v)


class Size(CamelModel):
    width: int
    height: int


class Point(CamelModel):
    x: int = 0
    y: int = 0


class Bounds(CamelModel):
    """A pixel rectangle in window coordinates."""

    x: int = 0
    y: int = 0
    width: int
    height: int


class DeviceEmulation(CamelModel):
    """Device emulation parameters handed to the host for one pane."""

    screen_position: str = "mobile"
    screen_size: Size
    view_position: Point = Field(default_factory=Point)
    view_size: Size
    device_scale_factor: float = 1.0
    scale: float

    @classmethod
    def for_config(cls, resolution: PaneResolution, scale: int) -> "DeviceEmulation":
        size = Size(width=resolution.width, height=resolution.height)
        return cls(screen_size=size, view_size=size, scale=scale / 100)
