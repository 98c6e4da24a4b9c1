from pathlib import Path

import pytest

from hydra_browser.core.downloads import DownloadTracker
from hydra_browser.core.events import Notification
from hydra_browser.models.download import DownloadState


@pytest.fixture
def download_dir(tmp_path):
    path = tmp_path / "downloads"
    path.mkdir()
    return path


@pytest.fixture
def context(partitions):
    return partitions.get_or_create("A")


@pytest.fixture
def tracker(hub, host, orchestrator, context, download_dir):
    tracker = DownloadTracker(
        hub,
        download_path=download_dir,
        shell=host.shell,
        origin_resolver=orchestrator.pane_id_for_content,
    )
    tracker.attach(context)
    return tracker


def only(tracker):
    (record,) = tracker.list()
    return record


def test_start_records_and_notifies(tracker, context, recorder, download_dir):
    item = context.start_download("notes.txt", "https://example.com/notes.txt", total_bytes=200)

    record = only(tracker)
    assert record.filename == "notes.txt"
    assert record.url == "https://example.com/notes.txt"
    assert record.state is DownloadState.PROGRESSING
    assert record.total_bytes == 200
    assert record.received_bytes == 0
    assert record.save_path == str(download_dir / "notes.txt")
    assert item.save_path == record.save_path
    assert recorder.of(Notification.DOWNLOAD_STARTED) == [record]


def test_existing_files_get_numbered_suffix(tracker, context, download_dir):
    (download_dir / "report.pdf").write_bytes(b"old")
    (download_dir / "report(1).pdf").write_bytes(b"older")

    item = context.start_download("report.pdf", "https://example.com/report.pdf")

    assert Path(item.save_path).name == "report(2).pdf"
    assert only(tracker).filename == "report.pdf"


def test_progress_then_completion(tracker, context, recorder):
    item = context.start_download("a.zip", "https://example.com/a.zip", total_bytes=100)

    item.progress(40)
    assert only(tracker).received_bytes == 40
    assert len(recorder.of(Notification.DOWNLOAD_PROGRESS)) == 1

    item.finish("completed")
    record = only(tracker)
    assert record.state is DownloadState.COMPLETED
    assert record.received_bytes == 100
    assert recorder.of(Notification.DOWNLOAD_COMPLETED) == [record]


def test_terminal_records_are_frozen(tracker, context, recorder):
    item = context.start_download("a.zip", "https://example.com/a.zip", total_bytes=100)
    item.finish("completed")
    recorder.clear()

    item.progress(10, interrupted=True)

    assert only(tracker).state is DownloadState.COMPLETED
    assert recorder.received == []


def test_interruption_while_progressing(tracker, context, recorder):
    item = context.start_download("big.iso", "https://example.com/big.iso", total_bytes=1000)

    item.progress(300, interrupted=True)
    item.finish("interrupted")

    record = only(tracker)
    assert record.state is DownloadState.INTERRUPTED
    assert record.received_bytes == 300
    assert recorder.of(Notification.DOWNLOAD_FAILED) == [record]


def test_unknown_terminal_state_counts_as_interrupted(tracker, context):
    item = context.start_download("x.bin", "https://example.com/x.bin")

    item.finish("exploded")

    assert only(tracker).state is DownloadState.INTERRUPTED


def test_cancel(tracker, context, recorder):
    context.start_download("x.bin", "https://example.com/x.bin")
    download_id = only(tracker).id

    assert tracker.cancel(download_id)
    assert only(tracker).state is DownloadState.CANCELLED
    assert len(recorder.of(Notification.DOWNLOAD_FAILED)) == 1

    assert tracker.cancel(download_id) is False
    assert tracker.cancel("missing") is False


def test_list_is_newest_first(tracker, context):
    for name in ("first.txt", "second.txt", "third.txt"):
        context.start_download(name, f"https://example.com/{name}")
    for start_time, record in enumerate(sorted(tracker.list(), key=lambda r: r.filename)):
        record.start_time = 1000 + start_time

    assert [r.filename for r in tracker.list()] == ["third.txt", "second.txt", "first.txt"]


def test_clear_keeps_active_downloads(tracker, context):
    done = context.start_download("done.txt", "https://example.com/done.txt")
    context.start_download("active.txt", "https://example.com/active.txt")
    failed = context.start_download("failed.txt", "https://example.com/failed.txt")
    done.finish("completed")
    failed.finish("interrupted")

    tracker.clear()

    assert [r.filename for r in tracker.list()] == ["active.txt"]
    assert tracker.has_active()


def test_open_file_only_when_completed(tracker, context, host):
    item = context.start_download("doc.pdf", "https://example.com/doc.pdf")
    record = only(tracker)

    assert tracker.open_file(record.id) is False
    item.finish("completed")
    assert tracker.open_file(record.id)
    assert host.shell.opened == [record.save_path]


def test_open_folder(tracker, context, host):
    context.start_download("doc.pdf", "https://example.com/doc.pdf")
    record = only(tracker)

    assert tracker.open_folder(record.id)
    assert host.shell.revealed == [record.save_path]
    assert tracker.open_folder("missing") is False


def test_download_attributed_to_originating_pane(tracker, context, orchestrator):
    pane_id = orchestrator.create().id
    content = orchestrator._panes.get(pane_id).content

    context.start_download("a.txt", "https://example.com/a.txt", origin=content)

    assert only(tracker).pane_id == pane_id


def test_download_survives_closing_its_pane(tracker, context, orchestrator):
    pane_id = orchestrator.create().id
    content = orchestrator._panes.get(pane_id).content
    item = context.start_download("a.txt", "https://example.com/a.txt", origin=content)

    orchestrator.close(pane_id)
    item.finish("completed")

    assert only(tracker).state is DownloadState.COMPLETED


def test_unseen_completed(tracker, context):
    item = context.start_download("a.txt", "https://example.com/a.txt")
    assert not tracker.has_unseen_completed()

    item.finish("completed")
    assert tracker.has_unseen_completed()

    tracker.mark_all_seen()
    assert not tracker.has_unseen_completed()


def test_download_path_can_change(tracker, context, tmp_path):
    other = tmp_path / "elsewhere"
    tracker.download_path = other

    item = context.start_download("a.txt", "https://example.com/a.txt")

    assert Path(item.save_path).parent == other
