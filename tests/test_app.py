import asyncio
import json

import pytest

from hydra_browser.core.app import Command, HydraApp
from hydra_browser.exceptions import UnknownCommandError
from hydra_browser.host.headless import HeadlessHost
from hydra_browser.models.download import DownloadState
from hydra_browser.models.pane import Bounds


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def download_dir(tmp_path):
    return tmp_path / "downloads"


async def started(hydra, host, download_dir):
    await hydra.start(host.window)
    await hydra.set_settings({"downloadPath": str(download_dir)})
    return hydra


@pytest.mark.asyncio
async def test_start_creates_data_dir_and_default_workspace(hydra, host, data_dir):
    await hydra.start(host.window)

    assert data_dir.is_dir()
    assert len(hydra.workspaces.list_all()) == 1
    assert len(hydra.panes) == 0
    # Every partition is watched for downloads
    assert len(hydra.partitions.contexts()) == 26


@pytest.mark.asyncio
async def test_pane_create_command_auto_saves(hydra, host, data_dir, download_dir):
    await started(hydra, host, download_dir)

    state = await hydra.dispatch(
        Command.PANE_CREATE, {"url": "https://example.com", "partition": "B", "scale": 250}
    )

    assert state.partition == "B"
    assert state.scale == 200
    document = read_json(data_dir / "workspaces.json")
    (pane,) = document["workspaces"][0]["panes"]
    assert pane["id"] == state.id
    assert pane["url"] == "https://example.com"


@pytest.mark.asyncio
async def test_dispatch_accepts_channel_names(hydra, host, download_dir):
    await started(hydra, host, download_dir)
    state = await hydra.dispatch("pane:create")

    assert await hydra.dispatch("pane:navigate", state.id, "https://next.example")
    (current,) = await hydra.dispatch("pane:getAll")
    assert current.url == "https://next.example"

    assert await hydra.dispatch("pane:close", state.id)
    assert await hydra.dispatch("pane:getAll") == []


@pytest.mark.asyncio
async def test_unknown_command(hydra):
    with pytest.raises(UnknownCommandError):
        await hydra.dispatch("pane:explode")


@pytest.mark.asyncio
async def test_update_command_moves_partition(hydra, host, data_dir, download_dir):
    await started(hydra, host, download_dir)
    state = await hydra.create_pane({"url": "https://example.com"})

    moved = await hydra.dispatch(Command.PANE_UPDATE, state.id, {"partition": "Z"})

    assert moved.id != state.id
    (pane,) = read_json(data_dir / "workspaces.json")["workspaces"][0]["panes"]
    assert (pane["id"], pane["partition"]) == (moved.id, "Z")


@pytest.mark.asyncio
async def test_workspace_commands(hydra, host, download_dir):
    await started(hydra, host, download_dir)

    created = await hydra.dispatch(Command.WORKSPACE_CREATE, "Staging")
    assert (await hydra.dispatch(Command.WORKSPACE_GET_ACTIVE)).id == created.id
    assert len(await hydra.dispatch(Command.WORKSPACE_GET_ALL)) == 2

    assert await hydra.dispatch(Command.WORKSPACE_RENAME, created.id, "Production")
    assert hydra.workspaces.get(created.id).name == "Production"

    assert await hydra.dispatch(Command.WORKSPACE_DELETE, created.id)
    assert len(await hydra.dispatch(Command.WORKSPACE_GET_ALL)) == 1


@pytest.mark.asyncio
async def test_downloads_from_any_partition_are_tracked(hydra, host, download_dir):
    await started(hydra, host, download_dir)
    pane = await hydra.create_pane({"partition": "K"})
    content = hydra.panes._panes.get(pane.id).content

    item = host.session_from_partition("persist:partition-K").start_download(
        "data.csv", "https://example.com/data.csv", total_bytes=10, origin=content
    )
    item.finish("completed")

    (record,) = await hydra.dispatch(Command.DOWNLOAD_GET_ALL)
    assert record.pane_id == pane.id
    assert record.state is DownloadState.COMPLETED
    assert record.save_path == str(download_dir / "data.csv")
    assert await hydra.dispatch(Command.DOWNLOAD_OPEN_FILE, record.id)
    assert await hydra.dispatch(Command.DOWNLOAD_CLEAR) is True
    assert await hydra.dispatch(Command.DOWNLOAD_GET_ALL) == []


@pytest.mark.asyncio
async def test_settings_commands(hydra, host, download_dir, tmp_path):
    await started(hydra, host, download_dir)

    settings = await hydra.dispatch(Command.SETTINGS_SET, {"theme": "dark"})
    assert settings.theme == "dark"
    assert (await hydra.dispatch(Command.SETTINGS_GET)).theme == "dark"
    assert hydra.downloads.download_path == download_dir


@pytest.mark.asyncio
async def test_select_download_path_updates_tracker(data_dir, tmp_path):
    chosen = str(tmp_path / "picked")
    host = HeadlessHost(picked_directory=chosen)
    hydra = HydraApp(host.session_from_partition, shell=host.shell, data_dir=data_dir)
    await hydra.start(host.window)

    assert await hydra.dispatch(Command.SETTINGS_SELECT_DOWNLOAD_PATH) == chosen
    assert str(hydra.downloads.download_path) == chosen


@pytest.mark.asyncio
async def test_shutdown_persists_everything(hydra, host, data_dir, download_dir):
    await started(hydra, host, download_dir)
    await hydra.create_pane({"url": "https://example.com"})
    host.window.bounds = Bounds(x=1, y=2, width=1111, height=888)

    await hydra.shutdown(host.window)

    assert read_json(data_dir / "window-state.json")["width"] == 1111
    settings = read_json(data_dir / "settings.json")
    assert settings["activeWorkspaceId"] == hydra.workspaces.active_workspace_id


@pytest.mark.asyncio
async def test_restart_restores_panes(hydra, host, data_dir, download_dir):
    await started(hydra, host, download_dir)
    await hydra.create_pane({"url": "https://one.example"})
    await hydra.create_pane({"url": "https://two.example", "partition": "C"})
    await hydra.shutdown(host.window)

    next_host = HeadlessHost()
    relaunched = HydraApp(next_host.session_from_partition, shell=next_host.shell, data_dir=data_dir)
    await relaunched.start(next_host.window)

    states = relaunched.panes.get_all_states()
    assert [(s.url, s.partition) for s in states] == [
        ("https://one.example", "A"),
        ("https://two.example", "C"),
    ]
    assert str(relaunched.downloads.download_path) == str(download_dir)


@pytest.mark.asyncio
async def test_content_spawned_pane_is_saved(hydra, host, data_dir, download_dir):
    await started(hydra, host, download_dir)
    opener = await hydra.create_pane({"url": "https://opener.example"})

    hydra.panes._panes.get(opener.id).content.request_new_window("https://popup.example")
    await hydra.shutdown()

    panes = read_json(data_dir / "workspaces.json")["workspaces"][0]["panes"]
    assert [p["url"] for p in panes] == ["https://opener.example", "https://popup.example"]


@pytest.mark.asyncio
async def test_listener_errors_do_not_break_commands(hydra, host, download_dir):
    await started(hydra, host, download_dir)

    def broken(notification, payload):
        raise RuntimeError("presentation layer crashed")

    hydra.hub.subscribe(broken)

    assert await hydra.create_pane() is not None


@pytest.mark.asyncio
async def test_spawned_pane_save_overlapping_command_save(hydra, host, data_dir, download_dir):
    await started(hydra, host, download_dir)

    for _ in range(10):
        opener = await hydra.create_pane({"url": "https://opener.example"})
        big = await hydra.create_pane({"url": "https://big.example/" + "x" * 4096})

        hydra.panes._panes.get(opener.id).content.request_new_window("https://popup.example")
        await asyncio.sleep(0)
        await hydra.close_pane(big.id)
        await hydra.close_pane(opener.id)

        document = read_json(data_dir / "workspaces.json")
        assert all(p["id"] != big.id for p in document["workspaces"][0]["panes"])

    await hydra.shutdown()
    urls = [p["url"] for p in read_json(data_dir / "workspaces.json")["workspaces"][0]["panes"]]
    assert urls == ["https://popup.example"] * 10
