from __future__ import annotations

import logging
import threading
from types import TracebackType
from typing import Callable, Protocol

DEFAULT_INTERVAL_SECONDS = 0.5

logger = logging.getLogger(__name__)


class ProgressDisplay(Protocol):
    """Anything that can advance an indeterminate progress indicator."""

    def tick(self) -> None: ...


class ProgressTicker:
    """Calls ``on_tick`` on a fixed interval from a background thread until stopped.

    ``stop()`` may be called any number of times, before ``start()`` or after
    the thread has already exited. Once it returns no further tick is started.
    """

    def __init__(self, on_tick: Callable[[], None], interval_seconds: float = DEFAULT_INTERVAL_SECONDS) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive.")
        self._on_tick = on_tick
        self._interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._tick_lock = threading.RLock()
        self._thread: threading.Thread | None = None
        self.tick_count = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> ProgressTicker:
        if self._thread is not None:
            raise RuntimeError("ProgressTicker can only be started once.")
        if self._stop_event.is_set():
            return self
        self._thread = threading.Thread(target=self._run, name="cutlist-progress", daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        with self._tick_lock:
            self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def __enter__(self) -> ProgressTicker:
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval_seconds):
            with self._tick_lock:
                if self._stop_event.is_set():
                    return
                try:
                    self._on_tick()
                except Exception:
                    logger.exception("Progress tick failed; no further ticks will be sent.")
                    return
                self.tick_count += 1
