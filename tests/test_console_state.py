import pytest

from hydra_browser.core.events import Notification
from hydra_browser.core.panes import next_console_state
from hydra_browser.models.pane import ConsoleLevel, ConsoleState

N, W, E = ConsoleState.NORMAL, ConsoleState.WARNING, ConsoleState.ERROR


@pytest.mark.parametrize(
    "current, level, expected",
    [
        (N, ConsoleLevel.VERBOSE, N),
        (N, ConsoleLevel.INFO, N),
        (N, ConsoleLevel.WARNING, W),
        (N, ConsoleLevel.ERROR, E),
        (W, ConsoleLevel.INFO, W),
        (W, ConsoleLevel.WARNING, W),
        (W, ConsoleLevel.ERROR, E),
        (E, ConsoleLevel.WARNING, E),
        (E, ConsoleLevel.VERBOSE, E),
        (E, ConsoleLevel.ERROR, E),
        (N, 7, N),
        (W, -1, W),
    ],
)
def test_next_console_state(current, level, expected):
    assert next_console_state(current, level) is expected


def test_plain_integers_match_enum_levels():
    assert next_console_state(N, 2) is W
    assert next_console_state(W, 3) is E


def test_pane_console_state_follows_messages(orchestrator, content_of):
    pane_id = orchestrator.create().id
    content = content_of(pane_id)

    content.emit_console(ConsoleLevel.WARNING, "deprecated API")
    assert orchestrator.get_state(pane_id).console_state is W

    content.emit_console(ConsoleLevel.ERROR, "uncaught TypeError")
    content.emit_console(ConsoleLevel.WARNING, "another warning")
    assert orchestrator.get_state(pane_id).console_state is E


def test_main_frame_navigation_resets_console_state(orchestrator, content_of):
    pane_id = orchestrator.create().id
    content = content_of(pane_id)
    content.emit_console(ConsoleLevel.ERROR)

    content.simulate_subframe_navigation("https://ads.example.com/frame")
    assert orchestrator.get_state(pane_id).console_state is E

    content.simulate_in_page_navigation("https://example.com/#section")
    assert orchestrator.get_state(pane_id).console_state is E

    content.simulate_navigation("https://example.com/next")
    assert orchestrator.get_state(pane_id).console_state is N


def test_state_update_published_only_on_change(orchestrator, recorder, content_of):
    pane_id = orchestrator.create().id
    content = content_of(pane_id)
    recorder.clear()

    content.emit_console(ConsoleLevel.INFO)
    content.emit_console(ConsoleLevel.WARNING)
    content.emit_console(ConsoleLevel.WARNING)

    updates = recorder.of(Notification.PANE_STATE_UPDATED)
    assert len(updates) == 1
    assert updates[0].console_state is W
