from proctorview.room.monitors import (
    FOCUS_LOST_REASON,
    FULLSCREEN_EXITED_REASON,
    FocusMonitor,
    FullscreenMonitor,
)
from proctorview.room.signals import BrowserSignal, SignalHub
from proctorview.utils.enums import EventType


def _collect():
    seen = []
    return seen, lambda kind, reason: seen.append((kind, reason))


def test_hidden_page_is_a_tab_switch():
    hub = SignalHub()
    seen, report = _collect()
    FocusMonitor(hub, report).attach()

    hub.emit(BrowserSignal.VISIBILITY_CHANGE, hidden=False)
    assert seen == []

    hub.emit(BrowserSignal.VISIBILITY_CHANGE, hidden=True)
    hub.emit(BrowserSignal.BLUR)
    assert seen == [
        (EventType.TAB_SWITCH, FOCUS_LOST_REASON),
        (EventType.WINDOW_BLUR, FOCUS_LOST_REASON),
    ]


def test_only_leaving_fullscreen_counts():
    hub = SignalHub()
    seen, report = _collect()
    FullscreenMonitor(hub, report).attach()

    hub.emit(BrowserSignal.FULLSCREEN_CHANGE, active=True)
    hub.emit(BrowserSignal.FULLSCREEN_CHANGE, active=False)
    assert seen == [(EventType.FULLSCREEN_EXIT, FULLSCREEN_EXITED_REASON)]


def test_detach_removes_every_listener():
    hub = SignalHub()
    seen, report = _collect()
    focus = FocusMonitor(hub, report)
    fullscreen = FullscreenMonitor(hub, report)

    focus.attach()
    focus.attach()
    fullscreen.attach()
    assert hub.listener_count() == 3

    focus.detach()
    fullscreen.detach()
    fullscreen.detach()
    assert hub.listener_count() == 0
    assert not focus.attached

    hub.emit(BrowserSignal.BLUR)
    hub.emit(BrowserSignal.FULLSCREEN_CHANGE, active=False)
    assert seen == []


def test_unsubscribe_only_removes_its_own_handler():
    hub = SignalHub()
    calls = []
    first = hub.subscribe(BrowserSignal.BLUR, lambda: calls.append("first"))
    hub.subscribe(BrowserSignal.BLUR, lambda: calls.append("second"))

    first()
    first()
    hub.emit(BrowserSignal.BLUR)
    assert calls == ["second"]
