"""
Defines the command-line interface for the application using Typer.

Every command works against the persisted documents in the data directory
through a `HydraApp` running on the headless host, so workspaces can be
inspected and edited without opening a window.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable
from typing import Any

import typer
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.logging import RichHandler

from hydra_browser import __version__
from hydra_browser.core.app import HydraApp
from hydra_browser.host.headless import HeadlessHost
from hydra_browser.models.pane import CreatePaneOptions, PaneResolution
from hydra_browser.models.settings import AppSettings, WindowState
from hydra_browser.models.workspace import WorkspaceConfig, WorkspacesDocument
from hydra_browser.storage.json_store import JsonDocument
from hydra_browser.utils.formatting import format_size
from hydra_browser.utils.path import get_data_dir

from .formatters import (
    print_partitions_table,
    print_presets_table,
    print_settings,
    print_window_state,
    print_workspace_detail,
    print_workspaces_table,
)

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("hydra_browser")

app = typer.Typer(
    name="hydra",
    help=(
        "Inspect and edit Hydra workspaces, settings and window state. Use 'hydra"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)
workspace_app = typer.Typer(help="List, create, rename, delete and switch workspaces.")
pane_app = typer.Typer(help="Add and close panes in the active workspace.")
settings_app = typer.Typer(help="Show and change application settings.")
window_app = typer.Typer(help="Show or reset the saved window geometry.")
app.add_typer(workspace_app, name="workspace")
app.add_typer(pane_app, name="pane")
app.add_typer(settings_app, name="settings")
app.add_typer(window_app, name="window")


def _run(job: Callable[[HydraApp], Awaitable[Any]], session: bool = False) -> Any:
    """
    Runs `job` against a fresh application on the headless host.

    With `session=True` the full startup sequence runs first and the shutdown
    sequence persists whatever the job changed; otherwise the job only reads.
    """

    async def _runner():
        host = HeadlessHost()
        hydra = HydraApp(host.session_from_partition, shell=host.shell, data_dir=get_data_dir())
        if not session:
            return await job(hydra)
        await hydra.start(host.window)
        try:
            return await job(hydra)
        finally:
            await hydra.shutdown()

    return asyncio.run(_runner())


def _resolve_workspace(hydra: HydraApp, ref: str) -> WorkspaceConfig:
    """Finds a workspace by id, falling back to an exact name match."""
    workspaces = hydra.workspaces.list_all()
    match = hydra.workspaces.get(ref) or next(
        (w for w in workspaces if w.name == ref), None
    )
    if match is None:
        console.print(f"[red]✗ No workspace with id or name '{ref}'.[/red]")
        raise typer.Exit(code=1)
    return match


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """Hydra multi-pane browser workspace tool"""
    if version:
        console.print(f"[bold]hydra[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose >= 2:
        log_level = "DEBUG"
    elif verbose == 1:
        log_level = "INFO"
    log.setLevel(log_level)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


# --- Workspaces ---


@workspace_app.command(name="list")
def workspace_list():
    """List all workspaces; the active one is marked."""

    async def _list(hydra: HydraApp):
        await hydra.workspaces.load()
        print_workspaces_table(
            hydra.workspaces.list_all(), hydra.workspaces.active_workspace_id
        )

    _run(_list)


@workspace_app.command(name="show")
def workspace_show(
    ref: str | None = typer.Argument(
        None, help="Workspace id or name. Defaults to the active workspace."
    ),
):
    """Show a workspace and its panes in display order."""

    async def _show(hydra: HydraApp):
        await hydra.workspaces.load()
        workspace = (
            _resolve_workspace(hydra, ref) if ref else hydra.workspaces.get_active()
        )
        print_workspace_detail(
            workspace, workspace.id == hydra.workspaces.active_workspace_id
        )

    _run(_show)


@workspace_app.command(name="create")
def workspace_create(
    name: str = typer.Argument("", help="Name for the new workspace."),
):
    """Create an empty workspace and make it active."""

    async def _create(hydra: HydraApp):
        workspace = await hydra.workspaces.create(name)
        console.print(
            f"[green]✓ Created workspace '{workspace.name}'[/green] [dim]({workspace.id})[/dim]"
        )

    _run(_create, session=True)


@workspace_app.command(name="rename")
def workspace_rename(
    ref: str = typer.Argument(..., help="Workspace id or name."),
    name: str = typer.Argument(..., help="New name."),
):
    """Rename a workspace."""

    async def _rename(hydra: HydraApp):
        workspace = _resolve_workspace(hydra, ref)
        old_name = workspace.name
        await hydra.workspaces.rename(workspace.id, name)
        console.print(f"[green]✓ Renamed '{old_name}' to '{name}'.[/green]")

    _run(_rename, session=True)


@workspace_app.command(name="delete")
def workspace_delete(
    ref: str = typer.Argument(..., help="Workspace id or name."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Bypass the confirmation prompt."
    ),
):
    """Delete a workspace. Deleting the last one leaves a fresh default."""

    async def _delete(hydra: HydraApp):
        workspace = _resolve_workspace(hydra, ref)
        if not force and not typer.confirm(
            f"Delete workspace '{workspace.name}' and its {len(workspace.panes)} panes?"
        ):
            console.print("[yellow]Operation cancelled.[/yellow]")
            raise typer.Abort()
        await hydra.workspaces.delete(workspace.id)
        active = hydra.workspaces.get_active()
        console.print(
            f"[green]✓ Deleted '{workspace.name}'.[/green] Active workspace is now"
            f" [cyan]{active.name}[/cyan]."
        )

    _run(_delete, session=True)


@workspace_app.command(name="switch")
def workspace_switch(
    ref: str = typer.Argument(..., help="Workspace id or name."),
):
    """Make a workspace the active one."""

    async def _switch(hydra: HydraApp):
        workspace = _resolve_workspace(hydra, ref)
        await hydra.workspaces.switch_to(workspace.id)
        console.print(f"[green]✓ Switched to '{workspace.name}'.[/green]")

    _run(_switch, session=True)


# --- Panes ---


@pane_app.command(name="add")
def pane_add(
    url: str = typer.Argument("about:blank", help="Address to load."),
    partition: str | None = typer.Option(
        None, "--partition", "-p", help="Storage partition letter (A-Z)."
    ),
    preset: str | None = typer.Option(
        None, "--preset", help="Device preset name; see 'hydra presets'."
    ),
    scale: int | None = typer.Option(
        None, "--scale", "-s", help="Zoom percentage, clamped to 10-200."
    ),
    after: int | None = typer.Option(
        None, "--after", help="Insert after the pane at this 1-based position."
    ),
):
    """Append a pane to the active workspace."""
    try:
        resolution = PaneResolution.from_preset(preset) if preset else None
        options = CreatePaneOptions(
            url=url, partition=partition, scale=scale, resolution=resolution
        )
    except ValueError as e:
        # ValidationError is a ValueError too
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e

    async def _add(hydra: HydraApp):
        pane_ids = hydra.panes.pane_ids
        if after is not None and 0 < after <= len(pane_ids):
            options.insert_after_pane_id = pane_ids[after - 1]
        state = await hydra.create_pane(options)
        if state is None:
            console.print("[red]✗ The pane could not be created.[/red]")
            raise typer.Exit(code=1)
        position = hydra.panes.pane_ids.index(state.id) + 1
        console.print(
            f"[green]✓ Added pane {position}[/green] [dim]{state.url}"
            f" (partition {state.partition}, {state.scale}%)[/dim]"
        )

    _run(_add, session=True)


@pane_app.command(name="close")
def pane_close(
    position: int = typer.Argument(..., help="1-based position of the pane."),
):
    """Remove a pane from the active workspace."""

    async def _close(hydra: HydraApp):
        pane_ids = hydra.panes.pane_ids
        if not 0 < position <= len(pane_ids):
            console.print(
                f"[red]✗ No pane at position {position}[/red]"
                f" [dim](the workspace has {len(pane_ids)}).[/dim]"
            )
            raise typer.Exit(code=1)
        await hydra.close_pane(pane_ids[position - 1])
        console.print(f"[green]✓ Closed pane {position}.[/green]")

    _run(_close, session=True)


# --- Settings and window ---


@settings_app.command(name="show")
def settings_show():
    """Display the current settings."""

    async def _show(hydra: HydraApp):
        print_settings(hydra.settings.document.path, await hydra.settings.load())

    _run(_show)


@settings_app.command(name="set")
def settings_set(
    key: str = typer.Argument(..., help="Setting key, e.g. theme or downloadPath."),
    value: str = typer.Argument(..., help="New value."),
):
    """Change one setting."""

    async def _set(hydra: HydraApp):
        await hydra.set_settings({key: value})
        console.print(f"[green]✓ {key} = {value}[/green]")

    _run(_set)


@window_app.command(name="show")
def window_show():
    """Display the saved window geometry."""

    async def _show(hydra: HydraApp):
        print_window_state(hydra.window_state.document.path, await hydra.window_state.load())

    _run(_show)


@window_app.command(name="reset")
def window_reset():
    """Forget the saved window geometry; the next launch uses defaults."""

    async def _reset(hydra: HydraApp):
        if await hydra.window_state.document.delete():
            console.print("[green]✓ Window state reset.[/green]")
        else:
            console.print("[red]✗ Failed to reset window state.[/red]")
            raise typer.Exit(code=1)

    _run(_reset)


# --- Reference and diagnostics ---


@app.command()
def partitions():
    """List storage partitions and how many saved panes use each."""

    async def _partitions(hydra: HydraApp):
        await hydra.workspaces.load()
        in_use = Counter(
            pane.partition
            for workspace in hydra.workspaces.list_all()
            for pane in workspace.panes
        )
        print_partitions_table(dict(in_use))

    _run(_partitions)


@app.command()
def presets():
    """List the built-in device resolution presets."""
    print_presets_table()


async def _check_document(document: JsonDocument, model: type[BaseModel]) -> bool:
    name = document.path.name
    if not document.exists():
        console.print(f"[dim]○ {name} not found; defaults will be used.[/dim]")
        return True

    size = format_size(document.path.stat().st_size)
    data = await document.load(None)
    if data is None:
        console.print(f"[red]✗ {name} ({size}) is not valid JSON.[/red]")
        return False
    try:
        model.model_validate(data)
    except ValidationError as e:
        console.print(f"[red]✗ {name} ({size}) failed validation:[/red]\n[dim]{e}[/dim]")
        return False
    console.print(f"[green]✓[/] {name} is valid [dim]({size})[/dim]")
    return True


@app.command()
def diagnose():
    """Check the data directory and the stored documents."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    data_dir = get_data_dir()
    if data_dir.is_dir():
        console.print(f"[green]✓[/] Data directory exists at: [dim]{data_dir}[/dim]")
    else:
        console.print(
            f"[yellow]○ Data directory {data_dir} does not exist yet;"
            " it is created on first launch.[/yellow]\n"
        )
        raise typer.Exit()

    async def _diagnose(hydra: HydraApp) -> bool:
        checks = (
            (hydra.workspaces.document, WorkspacesDocument),
            (hydra.settings.document, AppSettings),
            (hydra.window_state.document, WindowState),
        )
        results = [await _check_document(document, model) for document, model in checks]
        return all(results)

    issues_found = not _run(_diagnose)
    console.print()
    if not issues_found:
        console.print("[bold green]✓ All checks passed![/bold green]\n")
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
