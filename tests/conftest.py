# -*- coding: utf-8 -*-
"""
Shared pytest fixtures.

Time is fully simulated: FakeClock supplies "now" to the controllers and
TimerHarness stands in for RepeatingTimer, firing callbacks as the clock is
advanced.
"""
from concurrent.futures import Executor, Future
from datetime import datetime, timedelta

import pytest
from prometheus_client import CollectorRegistry

from actions.dispatcher import ActionDispatcher
from actions.interfaces import ActionInvoker
from collector import EventCollector
from scheduler.scheduler import RefreshScheduler


class FakeClock:
    """
    Local wall clock plus a monotonic reading.

    Assigning ``now`` moves both; ``shift_wall`` moves only the wall clock,
    like a DST change or an NTP correction.
    """

    def __init__(self, now: datetime):
        self._now = now
        self.elapsed = 0.0

    @property
    def now(self) -> datetime:
        return self._now

    @now.setter
    def now(self, value: datetime):
        self.elapsed += (value - self._now).total_seconds()
        self._now = value

    def __call__(self) -> datetime:
        return self._now

    def monotonic(self) -> float:
        return self.elapsed

    def set(self, hour: int, minute: int = 0):
        self.now = self._now.replace(hour=hour, minute=minute, second=0, microsecond=0)

    def shift_wall(self, **delta):
        self._now += timedelta(**delta)


class FakeTimer:
    def __init__(self, harness, interval, callback, name):
        self.harness = harness
        self.interval = interval
        self.callback = callback
        self.name = name
        self.cancelled = False
        self.next_due = harness.clock.now + timedelta(seconds=interval)

    def cancel(self, timeout=None):
        self.cancelled = True

    @property
    def active(self):
        return not self.cancelled


class TimerHarness:
    """Timer factory that records every timer and fires them on advance()."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.created = []
        self.fail_next = None

    def __call__(self, interval, callback, name):
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error
        timer = FakeTimer(self, interval, callback, name)
        self.created.append(timer)
        return timer

    def active(self):
        return [t for t in self.created if t.active]

    def advance(self, seconds: float = 0, minutes: float = 0):
        target = self.clock.now + timedelta(seconds=seconds, minutes=minutes)
        while True:
            due = [t for t in self.active() if t.next_due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.next_due)
            self.clock.now = timer.next_due
            timer.next_due += timedelta(seconds=timer.interval)
            timer.callback()
        self.clock.now = target


class SynchronousExecutor(Executor):
    """Runs submitted work inline so action calls are observable immediately."""

    def __init__(self):
        self._shutdown = False

    def submit(self, fn, *args, **kwargs):
        if self._shutdown:
            raise RuntimeError('cannot schedule new futures after shutdown')
        future = Future()
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future

    def shutdown(self, wait=True, **kwargs):
        self._shutdown = True


class RecordingInvoker(ActionInvoker):
    def __init__(self):
        self.refresh_calls = []
        self.sync_calls = []
        self.refresh_error = None
        self.sync_error = None
        self.clock = None

    def refresh_quotas(self):
        self.refresh_calls.append(self.clock() if self.clock else None)
        if self.refresh_error is not None:
            raise self.refresh_error

    def sync_account(self):
        self.sync_calls.append(self.clock() if self.clock else None)
        if self.sync_error is not None:
            raise self.sync_error

    def get_invoker_type(self):
        return "recording"


@pytest.fixture
def clock():
    # 23:00 is normal mode for the standard schedule
    return FakeClock(datetime(2024, 3, 1, 23, 0, 0))


@pytest.fixture
def timers(clock):
    return TimerHarness(clock)


@pytest.fixture
def events():
    return []


@pytest.fixture
def invoker(clock):
    invoker = RecordingInvoker()
    invoker.clock = clock
    return invoker


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def event_collector(registry):
    return EventCollector(registry=registry)


@pytest.fixture
def dispatcher(events):
    return ActionDispatcher(executor=SynchronousExecutor(), events=events.append)


@pytest.fixture
def scheduler(invoker, dispatcher, clock, timers, events):
    return RefreshScheduler(
        invoker=invoker,
        dispatcher=dispatcher,
        clock=clock,
        timer_factory=timers,
        events=events.append,
        time_source=clock.monotonic
    )


@pytest.fixture
def sync_executor():
    return SynchronousExecutor()
