from typing import Callable

from proctorview.room.signals import BrowserSignal, SignalHub
from proctorview.utils.enums import EventType

FOCUS_LOST_REASON = "Candidate switched tabs or moved focus away from the interview window."
FULLSCREEN_EXITED_REASON = "Candidate exited full-screen mode."

ViolationHandler = Callable[[EventType, str], None]


class _BrowserMonitor:
    def __init__(self, hub: SignalHub, on_violation: ViolationHandler):
        self._hub = hub
        self._on_violation = on_violation
        self._unsubscribers = []

    @property
    def attached(self) -> bool:
        return bool(self._unsubscribers)

    def _subscriptions(self):
        raise NotImplementedError

    def attach(self) -> None:
        if self.attached:
            return
        self._unsubscribers = [
            self._hub.subscribe(signal, handler) for signal, handler in self._subscriptions()
        ]

    def detach(self) -> None:
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()


class FocusMonitor(_BrowserMonitor):
    """Zero tolerance for the page going hidden or the window losing focus."""

    def _subscriptions(self):
        return [
            (BrowserSignal.VISIBILITY_CHANGE, self._on_visibility_change),
            (BrowserSignal.BLUR, self._on_blur),
        ]

    def _on_visibility_change(self, hidden: bool = False, **_):
        if hidden:
            self._on_violation(EventType.TAB_SWITCH, FOCUS_LOST_REASON)

    def _on_blur(self, **_):
        self._on_violation(EventType.WINDOW_BLUR, FOCUS_LOST_REASON)


class FullscreenMonitor(_BrowserMonitor):
    def _subscriptions(self):
        return [(BrowserSignal.FULLSCREEN_CHANGE, self._on_fullscreen_change)]

    def _on_fullscreen_change(self, active: bool = True, **_):
        if not active:
            self._on_violation(EventType.FULLSCREEN_EXIT, FULLSCREEN_EXITED_REASON)
