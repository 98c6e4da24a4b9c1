"""Shared fixtures built on the headless host."""

import pytest

from hydra_browser.core.app import HydraApp
from hydra_browser.core.events import NotificationHub, NotificationRecorder
from hydra_browser.core.panes import PaneOrchestrator
from hydra_browser.core.partitions import PartitionRegistry
from hydra_browser.host.headless import HeadlessHost


@pytest.fixture
def host():
    return HeadlessHost(picked_directory=None)


@pytest.fixture
def hub():
    return NotificationHub()


@pytest.fixture
def recorder(hub):
    """Records every notification published on `hub`."""
    recorder = NotificationRecorder()
    hub.subscribe(recorder)
    return recorder


@pytest.fixture
def partitions(host):
    return PartitionRegistry(host.session_from_partition)


@pytest.fixture
def orchestrator(partitions, hub, host):
    return PaneOrchestrator(partitions, hub, window=host.window)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def hydra(host, data_dir):
    return HydraApp(host.session_from_partition, shell=host.shell, data_dir=data_dir)


@pytest.fixture
def content_of(orchestrator):
    """Looks up the headless content behind a live pane."""

    def _content_of(pane_id):
        return orchestrator._panes.get(pane_id).content

    return _content_of
