"""Tests for BackgroundScheduler: unique named periodic jobs."""

import threading

import pytest

from desk_core.constants import KEY_SCHEDULE_LAST_RUN
from desk_core.poller import ForegroundPoller
from desk_core.scheduler import BackgroundScheduler

from conftest import FakeAfter, FakeSource, make_snapshot

NAME = "widget_update"


@pytest.fixture
def scheduler(store):
    sched = BackgroundScheduler(store)
    yield sched
    sched.shutdown()


def counting_job():
    ran = threading.Event()
    calls = []

    def job(stop_event):
        calls.append(stop_event)
        ran.set()

    return job, ran, calls


class TestEnqueue:

    def test_first_run_is_immediate_without_history(self, scheduler, store):
        job, ran, _ = counting_job()
        scheduler.enqueue_unique_periodic(NAME, 3600, job)
        assert ran.wait(2)
        assert scheduler.last_run(NAME) is not None

    def test_reregistering_replaces_previous(self, scheduler):
        job_a, ran_a, calls_a = counting_job()
        job_b, ran_b, _ = counting_job()

        first = scheduler.enqueue_unique_periodic(NAME, 3600, job_a)
        assert ran_a.wait(2)
        second = scheduler.enqueue_unique_periodic(NAME, 3600, job_b)

        first.thread.join(2)
        assert not first.thread.is_alive()
        assert first.stop.is_set()
        assert second.thread.is_alive()
        assert scheduler.scheduled() == [NAME]
        assert len(calls_a) == 1
        # cadence carries over: A just ran, so B is not due for another interval
        assert not ran_b.wait(0.2)

    def test_rejects_non_positive_interval(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.enqueue_unique_periodic(NAME, 0, lambda stop: None)

    def test_crashing_job_keeps_schedule(self, scheduler):
        runs = []
        second = threading.Event()

        def job(stop_event):
            runs.append(1)
            if len(runs) >= 2:
                second.set()
            raise RuntimeError("boom")

        scheduler.enqueue_unique_periodic(NAME, 0.05, job)
        assert second.wait(3)


class TestCancel:

    def test_cancel(self, scheduler):
        job, ran, _ = counting_job()
        reg = scheduler.enqueue_unique_periodic(NAME, 3600, job)
        assert scheduler.cancel(NAME)
        assert not scheduler.is_scheduled(NAME)
        reg.thread.join(2)
        assert not reg.thread.is_alive()
        assert not scheduler.cancel(NAME)


class TestPersistedCadence:

    def test_delay_continues_from_last_run(self, store):
        store.set(KEY_SCHEDULE_LAST_RUN.format(name=NAME), 1000.0)
        sched = BackgroundScheduler(store, clock=lambda: 1060.0)
        assert sched._initial_delay(NAME, 900) == pytest.approx(840.0)

    def test_overdue_runs_now(self, store):
        store.set(KEY_SCHEDULE_LAST_RUN.format(name=NAME), 0.0)
        sched = BackgroundScheduler(store, clock=lambda: 5000.0)
        assert sched._initial_delay(NAME, 900) == 0.0

    def test_clock_skew_never_waits_beyond_interval(self, store):
        store.set(KEY_SCHEDULE_LAST_RUN.format(name=NAME), 99_999.0)
        sched = BackgroundScheduler(store, clock=lambda: 0.0)
        assert sched._initial_delay(NAME, 900) == 900.0

    def test_garbage_last_run_ignored(self, store):
        store.set(KEY_SCHEDULE_LAST_RUN.format(name=NAME), "yesterday")
        assert BackgroundScheduler(store).last_run(NAME) is None


class TestIndependentOfForeground:

    def test_pausing_foreground_leaves_background_running(self, scheduler):
        job, ran, _ = counting_job()
        scheduler.enqueue_unique_periodic(NAME, 3600, job)

        after = FakeAfter()
        poller = ForegroundPoller(
            FakeSource(make_snapshot(1)), pipeline=None, after=after.after,
            after_cancel=after.after_cancel, dispatch=lambda fn, *a: fn(*a),
            on_snapshot=lambda s, c: None, on_error=lambda e: None,
        )
        poller.resume()
        poller.pause()

        assert ran.wait(2)
        assert scheduler.is_scheduled(NAME)
