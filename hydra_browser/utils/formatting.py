"""
Helper functions for formatting data into human-readable strings.
"""


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while bytes_size >= 1024 and i < len(units) - 1:
        bytes_size /= 1024
        i += 1
    return f"{bytes_size:.1f} {units[i]}"


def format_resolution(width: int, height: int, preset_name: str | None = None) -> str:
    """Formats a resolution, e.g. '1366x768 (Laptop)'."""
    text = f"{width}x{height}"
    if preset_name:
        text += f" ({preset_name})"
    return text
