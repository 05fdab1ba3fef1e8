import threading
from collections.abc import Callable
from typing import Protocol


class CancelToken:
    """
    Shared flag telling a scheduled callback (or an in-flight cycle) to stand down.
    """

    def __init__(self):
        self._event = threading.Event()
        self._on_cancel: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def add_cancel_callback(self, callback: Callable[[], None]) -> None:
        self._on_cancel.append(callback)

    def cancel(self) -> None:
        if self._event.is_set():
            return
        self._event.set()
        for callback in self._on_cancel:
            callback()


class Scheduler(Protocol):
    def schedule(self, after_ms: int, callback: Callable[[], None]) -> CancelToken: ...


class TimerScheduler:
    """
    Run each callback once on a daemon threading.Timer.
    """

    def schedule(self, after_ms: int, callback: Callable[[], None]) -> CancelToken:
        token = CancelToken()

        def fire():
            if not token.cancelled:
                callback()

        timer = threading.Timer(max(0, after_ms) / 1000, fire)
        timer.daemon = True
        token.add_cancel_callback(timer.cancel)
        timer.start()
        return token
