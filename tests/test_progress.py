from __future__ import annotations

import threading
import time

import pytest

from cutlists.progress import ProgressTicker


def test_ticker_ticks_until_stopped_and_never_after() -> None:
    ticks: list[int] = []
    ticker = ProgressTicker(lambda: ticks.append(1), interval_seconds=0.01)

    ticker.start()
    time.sleep(0.1)
    ticker.stop()
    observed = len(ticks)
    time.sleep(0.1)

    assert observed > 0
    assert len(ticks) == observed
    assert ticker.tick_count == observed
    assert not ticker.running


def test_stop_is_idempotent_and_safe_before_start() -> None:
    ticker = ProgressTicker(lambda: None, interval_seconds=0.01)

    ticker.stop()
    ticker.stop()
    ticker.start()
    time.sleep(0.05)

    assert ticker.tick_count == 0
    assert not ticker.running


def test_stop_after_thread_exited_does_not_block() -> None:
    def _fail() -> None:
        raise RuntimeError("display gone")

    ticker = ProgressTicker(_fail, interval_seconds=0.01)
    ticker.start()
    time.sleep(0.1)

    assert not ticker.running

    done = threading.Event()

    def _stop() -> None:
        ticker.stop()
        ticker.stop()
        done.set()

    threading.Thread(target=_stop, daemon=True).start()

    assert done.wait(1.0)
    assert ticker.tick_count == 0


def test_context_manager_stops_on_exception() -> None:
    ticks: list[int] = []

    with pytest.raises(ValueError):
        with ProgressTicker(lambda: ticks.append(1), interval_seconds=0.01) as ticker:
            time.sleep(0.05)
            raise ValueError("boom")

    observed = len(ticks)
    time.sleep(0.05)

    assert not ticker.running
    assert len(ticks) == observed


def test_ticker_cannot_start_twice() -> None:
    ticker = ProgressTicker(lambda: None, interval_seconds=0.01)
    ticker.start()
    try:
        with pytest.raises(RuntimeError, match="only be started once"):
            ticker.start()
    finally:
        ticker.stop()


def test_ticker_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError, match="positive"):
        ProgressTicker(lambda: None, interval_seconds=0)
