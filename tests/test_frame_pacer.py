import threading

import pytest

from solfege_tuner.services.frame_pacer import RefreshPacer


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.slept = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.slept.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def pacer(clock):
    return RefreshPacer(refresh_rate=50.0, clock=clock, sleep=clock.sleep)


def test_callback_fires_once_with_timestamp(pacer, clock):
    stamps = []
    clock.now = 12.5
    pacer.request_tick(stamps.append)

    assert pacer.run_once() == 1
    assert pacer.run_once() == 0
    assert stamps == [12.5]


def test_requests_made_during_a_refresh_wait_for_the_next(pacer):
    calls = []

    def tick(timestamp):
        calls.append(timestamp)
        pacer.request_tick(tick)

    pacer.request_tick(tick)
    pacer.run_once()
    pacer.run_once()

    assert len(calls) == 2
    assert pacer.pending() == 1


def test_cancel_before_refresh(pacer):
    calls = []
    handle = pacer.request_tick(calls.append)
    pacer.cancel_tick(handle)

    assert pacer.run_once() == 0
    assert calls == []


def test_cancel_from_an_earlier_callback_in_the_same_refresh(pacer):
    calls = []
    second = None

    def first(timestamp):
        calls.append("first")
        pacer.cancel_tick(second)

    pacer.request_tick(first)
    second = pacer.request_tick(lambda ts: calls.append("second"))

    assert pacer.run_once() == 1
    assert calls == ["first"]


def test_cancel_unknown_handle_is_harmless(pacer):
    pacer.cancel_tick(999)


def test_handles_are_unique(pacer):
    handles = {pacer.request_tick(lambda ts: None) for _ in range(10)}
    assert len(handles) == 10


def test_failing_callback_keeps_remaining_requests(pacer):
    calls = []

    def broken(timestamp):
        raise RuntimeError("boom")

    pacer.request_tick(broken)
    pacer.request_tick(calls.append)

    with pytest.raises(RuntimeError):
        pacer.run_once()
    assert pacer.run_once() == 1
    assert len(calls) == 1


def test_threadsafe_calls_run_before_ticks(pacer):
    order = []
    pacer.request_tick(lambda ts: order.append("tick"))

    worker = threading.Thread(
        target=pacer.call_soon_threadsafe, args=(lambda: order.append("call"),)
    )
    worker.start()
    worker.join()
    pacer.run_once()

    assert order == ["call", "tick"]


def test_run_for_duration(pacer, clock):
    count = []

    def tick(timestamp):
        count.append(timestamp)
        pacer.request_tick(tick)

    pacer.request_tick(tick)
    pacer.run(duration=0.99)

    # 50 refreshes per second, sleeping out each interval
    assert len(count) == 50
    assert all(s == pytest.approx(0.02) for s in clock.slept)


def test_run_until_predicate(pacer):
    count = []

    def tick(timestamp):
        count.append(timestamp)
        pacer.request_tick(tick)

    pacer.request_tick(tick)
    pacer.run(until=lambda: len(count) >= 3)
    assert len(count) == 3


def test_stop_from_callback(pacer):
    count = []

    def tick(timestamp):
        count.append(timestamp)
        if len(count) == 4:
            pacer.stop()
        pacer.request_tick(tick)

    pacer.request_tick(tick)
    pacer.run()
    assert len(count) == 4


def test_invalid_refresh_rate():
    with pytest.raises(ValueError):
        RefreshPacer(refresh_rate=0)
