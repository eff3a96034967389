import logging
from collections import defaultdict
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class BrowserSignal(str, Enum):
    VISIBILITY_CHANGE = "visibilitychange"
    BLUR = "blur"
    FULLSCREEN_CHANGE = "fullscreenchange"


class SignalHub:
    """Listener registry for the signals the candidate's browser reports.

    Mirrors add/removeEventListener: monitors subscribe while they are active
    and call the returned function to unsubscribe.
    """

    def __init__(self):
        self._listeners = defaultdict(list)

    def subscribe(self, signal: BrowserSignal, handler: Callable[..., None]) -> Callable[[], None]:
        self._listeners[signal].append(handler)

        def unsubscribe():
            if handler in self._listeners[signal]:
                self._listeners[signal].remove(handler)

        return unsubscribe

    def emit(self, signal: BrowserSignal, **payload) -> None:
        for handler in list(self._listeners[signal]):
            handler(**payload)

    def listener_count(self, signal: BrowserSignal = None) -> int:
        if signal is not None:
            return len(self._listeners[signal])
        return sum(len(handlers) for handlers in self._listeners.values())
