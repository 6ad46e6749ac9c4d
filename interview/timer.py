"""Cancellable per-question countdown."""
from __future__ import annotations

import threading
from typing import Callable, Optional


class CountdownTimer:
    """Counts ``seconds`` down one tick at a time and fires ``on_expire`` once.

    ``start`` drives ``tick`` from a daemon thread every ``interval`` seconds;
    callers that want deterministic control can call ``tick`` themselves.
    After ``cancel`` no further callbacks run.
    """

    def __init__(
        self,
        seconds: int,
        on_expire: Callable[[], None],
        *,
        on_tick: Optional[Callable[[int], None]] = None,
        interval: float = 1.0,
    ) -> None:
        self.remaining = max(0, int(seconds))
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._interval = interval
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._fired = False
        self._thread: Optional[threading.Thread] = None

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    @property
    def expired(self) -> bool:
        return self._fired

    def start(self) -> "CountdownTimer":
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, name="countdown", daemon=True)
            self._thread.start()
        return self

    def cancel(self) -> None:
        self._stop.set()

    def tick(self) -> int:
        with self._lock:
            if self._stop.is_set() or self._fired:
                return self.remaining
            self.remaining = max(0, self.remaining - 1)
            remaining = self.remaining
            expire = remaining == 0
            if expire:
                self._fired = True
                self._stop.set()
        if self._on_tick is not None:
            self._on_tick(remaining)
        if expire:
            self._on_expire()
        return remaining

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.tick()


__all__ = ["CountdownTimer"]
