import logging

from hydra_browser.core.events import Notification, NotificationHub, NotificationRecorder
from hydra_browser.models.pane import PaneConfig
from hydra_browser.utils.structured_logger import create_structured_logger


def test_listeners_receive_in_subscription_order():
    hub = NotificationHub()
    calls = []
    hub.subscribe(lambda n, p: calls.append(("first", n, p)))
    hub.subscribe(lambda n, p: calls.append(("second", n, p)))

    hub.publish(Notification.PANE_CLOSED, "p1")

    assert calls == [
        ("first", Notification.PANE_CLOSED, "p1"),
        ("second", Notification.PANE_CLOSED, "p1"),
    ]


def test_unsubscribe():
    hub = NotificationHub()
    recorder = NotificationRecorder()
    unsubscribe = hub.subscribe(recorder)

    unsubscribe()
    unsubscribe()
    hub.publish(Notification.PANE_CLOSED, "p1")

    assert recorder.received == []


def test_failing_listener_does_not_stop_delivery(caplog):
    hub = NotificationHub()
    recorder = NotificationRecorder()

    def broken(notification, payload):
        raise RuntimeError("boom")

    hub.subscribe(broken)
    hub.subscribe(recorder)

    with caplog.at_level(logging.ERROR, logger="hydra_browser.core.events"):
        hub.publish(Notification.PANE_FOCUS_CHANGED, "p2")

    assert recorder.of(Notification.PANE_FOCUS_CHANGED) == ["p2"]
    assert "pane:focusChanged" in caplog.text


def test_notification_logger_names_events(caplog):
    _, notification_logger, _ = create_structured_logger()
    hub = NotificationHub()
    hub.subscribe(notification_logger)

    with caplog.at_level(logging.INFO, logger="hydra_browser.events"):
        hub.publish(Notification.PANE_STATE_UPDATED, PaneConfig(id="p1", partition="B"))

    assert "[pane_state_updated]" in caplog.text
    assert "partition=B" in caplog.text


def test_json_session_log(tmp_path):
    base, notification_logger, session_logger = create_structured_logger(
        tmp_path / "logs", enable_json=True
    )
    session_logger.session_started(tmp_path, workspaces=2, active_workspace="Main")
    notification_logger(Notification.PANE_CLOSED, "p1")
    base.close()

    (log_file,) = (tmp_path / "logs").glob("hydra_*.jsonl")
    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert '"event": "session_started"' in lines[0]
    assert '"pane_id": "p1"' in lines[1]
