"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hydra_browser.models.pane import (
    PARTITION_IDS,
    RESOLUTION_PRESETS,
    SESSION_PARTITION_PREFIX,
    PaneConfig,
)
from hydra_browser.models.settings import AppSettings, WindowState
from hydra_browser.models.workspace import WorkspaceConfig
from hydra_browser.utils.formatting import format_resolution


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "InvalidPartitionError": [
            "• Partitions are single uppercase letters from A to Z.",
            "• Run `hydra partitions` to list them.",
        ],
        "HostError": [
            "• The host window may have been closed.",
            "• Restart the application and try again.",
        ],
        "UnknownCommandError": [
            "• The command name is not recognised by this version.",
        ],
        "ValidationError": [
            "• One of the values has the wrong type or is out of range.",
            "• Run `hydra settings show` to see the accepted keys.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_workspaces_table(workspaces: list[WorkspaceConfig], active_id: str):
    """Lists workspaces, marking the active one."""
    console = Console()
    table = Table(box=box.ROUNDED)
    table.add_column("", width=1)
    table.add_column("Name", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Panes", justify="right", style="green")

    for workspace in workspaces:
        marker = "[bold green]●[/bold green]" if workspace.id == active_id else ""
        table.add_row(marker, workspace.name, workspace.id, str(len(workspace.panes)))

    console.print(table)


def print_workspace_detail(workspace: WorkspaceConfig, is_active: bool):
    """Shows one workspace and its panes in display order."""
    console = Console()
    title = f"[bold]{workspace.name}[/bold] [dim]({workspace.id})[/dim]"
    if is_active:
        title += " [green]active[/green]"

    if not workspace.panes:
        console.print(Panel("[dim]No panes.[/dim]", title=title, border_style="cyan"))
        return

    table = Table(box=None, padding=(0, 2))
    table.add_column("#", style="dim", justify="right")
    table.add_column("URL", style="cyan", overflow="fold")
    table.add_column("Partition", justify="center", style="magenta")
    table.add_column("Resolution")
    table.add_column("Scale", justify="right")
    for index, pane in enumerate(workspace.panes, 1):
        table.add_row(str(index), *_pane_cells(pane))

    console.print(Panel(table, title=title, border_style="cyan"))


def _pane_cells(pane: PaneConfig) -> tuple[str, str, str, str]:
    resolution = pane.resolution
    return (
        pane.url,
        pane.partition,
        format_resolution(resolution.width, resolution.height, resolution.preset_name),
        f"{pane.scale}%",
    )


def print_settings(settings_path: Path, settings: AppSettings):
    """Displays the settings document as camelCase key/value pairs."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    for key, value in settings.to_document().items():
        table.add_row(key, str(value) if value != "" else "[dim](unset)[/dim]")

    console.print(
        Panel(table, title=f"Settings ([dim]{settings_path}[/dim])", border_style="cyan")
    )


def print_window_state(state_path: Path, state: WindowState | None):
    console = Console()
    if state is None:
        console.print(
            f"[yellow]No saved window state at {state_path}; defaults will be used.[/yellow]"
        )
        return

    position = "centered" if state.x is None or state.y is None else f"{state.x}, {state.y}"
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("Position:", position)
    table.add_row("Size:", format_resolution(state.width, state.height))
    table.add_row("Maximized:", "✓ Yes" if state.is_maximized else "✗ No")

    console.print(
        Panel(table, title=f"Window State ([dim]{state_path}[/dim])", border_style="cyan")
    )


def print_partitions_table(in_use: dict[str, int]):
    """Lists every partition and how many stored panes use it."""
    console = Console()
    table = Table(box=box.ROUNDED, title="Storage Partitions")
    table.add_column("Partition", justify="center", style="bold magenta")
    table.add_column("Session", style="dim")
    table.add_column("Panes", justify="right", style="green")
    for partition in PARTITION_IDS:
        count = in_use.get(partition, 0)
        table.add_row(
            partition,
            f"{SESSION_PARTITION_PREFIX}{partition}",
            str(count) if count else "[dim]-[/dim]",
        )
    console.print(table)


def print_presets_table():
    """Displays the built-in device resolution presets grouped by category."""
    console = Console()
    table = Table(box=box.ROUNDED, title="Resolution Presets")
    table.add_column("Device", style="cyan")
    table.add_column("Resolution", justify="right")

    category = None
    for preset in RESOLUTION_PRESETS:
        if preset.category != category:
            category = preset.category
            table.add_section()
            table.add_row(f"[bold]-- {category} --[/bold]", "")
        table.add_row(preset.device_name, format_resolution(preset.width, preset.height))

    console.print(table)
