import json

import pytest

from hydra_browser.exceptions import HydraError
from hydra_browser.host.headless import HeadlessHost
from hydra_browser.models.settings import AppSettings
from hydra_browser.storage.json_store import JsonDocument
from hydra_browser.storage.settings_manager import SettingsManager
from hydra_browser.utils.path import get_default_download_dir


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "settings.json"


@pytest.fixture
def manager(settings_path, tmp_path):
    return SettingsManager(JsonDocument(settings_path), tmp_path)


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.mark.asyncio
async def test_defaults_when_missing(manager):
    settings = await manager.load()

    assert settings.theme == "system"
    assert settings.language == "en"
    assert settings.download_path == str(get_default_download_dir())
    assert settings.active_workspace_id == ""


@pytest.mark.asyncio
async def test_missing_keys_are_migrated(manager, settings_path):
    settings_path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

    settings = await manager.load()

    assert settings.theme == "dark"
    assert set(read_json(settings_path)) == {
        "downloadPath",
        "activeWorkspaceId",
        "theme",
        "language",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["[]", "{broken", json.dumps({"theme": "neon"})])
async def test_invalid_document_yields_defaults(manager, settings_path, content):
    settings_path.write_text(content, encoding="utf-8")

    assert await manager.load() == AppSettings()


@pytest.mark.asyncio
async def test_update_accepts_camel_and_snake_keys(manager, settings_path, tmp_path):
    await manager.update(downloadPath=str(tmp_path / "dl"), language="ja")
    updated = await manager.update(active_workspace_id="w1")

    assert updated.download_path == str(tmp_path / "dl")
    assert updated.language == "ja"
    document = read_json(settings_path)
    assert document["activeWorkspaceId"] == "w1"
    assert document["downloadPath"] == str(tmp_path / "dl")


@pytest.mark.asyncio
async def test_update_rejects_unknown_key(manager):
    with pytest.raises(HydraError, match="Unknown setting"):
        await manager.update(fontSize=14)


@pytest.mark.asyncio
async def test_update_rejects_invalid_value(manager, settings_path):
    with pytest.raises(HydraError, match="Invalid settings"):
        await manager.update(theme="neon")
    assert not settings_path.exists()


@pytest.mark.asyncio
async def test_empty_download_path_falls_back(manager):
    settings = await manager.update(downloadPath="")

    assert settings.download_path == str(get_default_download_dir())


@pytest.mark.asyncio
async def test_select_download_path(manager, tmp_path):
    chosen = str(tmp_path / "picked")
    host = HeadlessHost(picked_directory=chosen)

    assert await manager.select_download_path(host.shell) == chosen
    assert (await manager.load()).download_path == chosen


@pytest.mark.asyncio
async def test_select_download_path_cancelled(manager, settings_path):
    host = HeadlessHost(picked_directory=None)

    assert await manager.select_download_path(host.shell) is None
    assert not settings_path.exists()


@pytest.mark.asyncio
async def test_clear_autofill(manager, tmp_path):
    autofill = tmp_path / "autofill"
    autofill.mkdir()
    (autofill / "entries.json").write_text("{}")

    assert await manager.clear_autofill()
    assert not autofill.exists()
    # Nothing left to clear is still a success
    assert await manager.clear_autofill()
