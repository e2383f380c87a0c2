"""
Poll ticks: fetch a snapshot with a hard deadline, then run the milestone
pipeline on it.

  MilestonePipeline   — widget text, check_and_advance, fan-out (any thread)
  ForegroundPoller    — 5s ticks while the dashboard is visible (Tk thread
                        schedules, worker thread fetches)
  BackgroundRefresh   — one background tick with bounded retry
"""

import threading
import time

from .constants import (
    FOREGROUND_INTERVAL_SEC, FETCH_TIMEOUT_SEC, BACKGROUND_RETRIES, THRESHOLD_STEP,
)
from .config import log
from .errors import NetworkError, AuthError
from .store import format_amount


def fetch_with_deadline(source, timeout=FETCH_TIMEOUT_SEC):
    """
    source.fetch() on a daemon thread, waiting at most `timeout` seconds.
    A stalled fetch is abandoned (its thread finishes on its own) and
    reported as NetworkError so the next tick is never blocked by it.
    """
    result = {}
    done = threading.Event()

    def do_fetch():
        try:
            result["snapshot"] = source.fetch()
        except Exception as e:
            result["error"] = e
        finally:
            done.set()

    threading.Thread(target=do_fetch, name="snapshot-fetch", daemon=True).start()
    if not done.wait(timeout):
        raise NetworkError(f"fetch did not finish within {timeout}s")
    if "error" in result:
        raise result["error"]
    return result["snapshot"]


class MilestonePipeline:
    """What every successful tick does, whichever schedule produced it."""

    def __init__(self, tracker, widget_store, fanout,
                 threshold_step=THRESHOLD_STEP, metric="registrations"):
        self._tracker = tracker
        self._widget_store = widget_store
        self._fanout = fanout
        self._threshold_step = threshold_step
        self._metric = metric

    def handle(self, snapshot):
        """Returns the crossed threshold this call claimed, or None."""
        self._widget_store.set(format_amount(snapshot.total_amount))

        crossed = self._tracker.check_and_advance(snapshot.metric(self._metric),
                                                  self._threshold_step)
        if crossed is not None:
            self._fanout.announce(crossed)
        return crossed


class ForegroundPoller:
    """
    Visibility-bound schedule. resume() when the dashboard is mapped,
    pause() when it is not; paused means no pending tick and none buffered.

    after/after_cancel are Tk's (root.after). Fetches run on worker threads
    and come back through `dispatch` (UiDispatcher.post). A tick already in
    flight when pause() is called still completes its pipeline work but
    does not schedule the next one.
    """

    def __init__(self, source, pipeline, after, after_cancel, dispatch,
                 on_snapshot, on_error, interval_sec=FOREGROUND_INTERVAL_SEC,
                 fetch_timeout=FETCH_TIMEOUT_SEC, spawn=None):
        self._source = source
        self._pipeline = pipeline
        self._after = after
        self._after_cancel = after_cancel
        self._dispatch = dispatch
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._interval_ms = int(interval_sec * 1000)
        self._fetch_timeout = fetch_timeout
        self._spawn = spawn or _spawn_daemon

        self._running = False
        self._job = None
        self._in_flight = False
        self._generation = 0
        self.ticks = 0

    @property
    def running(self):
        return self._running

    @property
    def in_flight(self):
        return self._in_flight

    def resume(self):
        if self._running:
            return
        self._running = True
        self._generation += 1
        log.info("Foreground polling resumed (every %dms)", self._interval_ms)
        self._job = self._after(0, self._tick)

    def pause(self):
        if not self._running:
            return
        self._running = False
        self._generation += 1
        if self._job is not None:
            self._after_cancel(self._job)
            self._job = None
        log.info("Foreground polling paused")

    def refresh_now(self):
        """Manual refresh. Ignored while a tick is in flight."""
        if not self._in_flight:
            self._start_fetch(self._generation)

    def _tick(self):
        self._job = None
        if not self._running:
            return
        if self._in_flight:
            self._schedule_next(self._generation)
            return
        self._start_fetch(self._generation)

    def _start_fetch(self, generation):
        self._in_flight = True
        self.ticks += 1
        self._spawn(lambda: self._fetch(generation))

    def _fetch(self, generation):
        """Worker thread: fetch + pipeline, then hop back to the UI thread."""
        try:
            snapshot = fetch_with_deadline(self._source, self._fetch_timeout)
            crossed = self._pipeline.handle(snapshot)
        except Exception as e:
            self._dispatch(self._finish_error, generation, e)
        else:
            self._dispatch(self._finish_ok, generation, snapshot, crossed)

    def _finish_ok(self, generation, snapshot, crossed):
        self._in_flight = False
        try:
            self._on_snapshot(snapshot, crossed)
        finally:
            self._schedule_next(generation)

    def _finish_error(self, generation, error):
        self._in_flight = False
        if isinstance(error, AuthError):
            log.error("Foreground tick: session rejected — %s", error)
        else:
            log.warning("Foreground tick failed: %s", error)
        try:
            self._on_error(error)
        finally:
            self._schedule_next(generation)

    def _schedule_next(self, generation):
        if self._running and generation == self._generation and self._job is None:
            self._job = self._after(self._interval_ms, self._tick)


class BackgroundRefresh:
    """
    Job body for the background schedule: up to `retries` attempts with
    2s, 4s backoff, then give up until the next scheduled run. Returns True
    if a snapshot was processed.
    """

    def __init__(self, source, pipeline, retries=BACKGROUND_RETRIES,
                 fetch_timeout=FETCH_TIMEOUT_SEC, sleep=time.sleep):
        self._source = source
        self._pipeline = pipeline
        self._retries = max(1, retries)
        self._fetch_timeout = fetch_timeout
        self._sleep = sleep

    def __call__(self, stop_event=None):
        for attempt in range(self._retries):
            try:
                snapshot = fetch_with_deadline(self._source, self._fetch_timeout)
                crossed = self._pipeline.handle(snapshot)
                log.info("Background refresh OK | total=%d | amount=%d%s",
                         snapshot.total_count, snapshot.total_amount,
                         f" | milestone={crossed}" if crossed else "")
                return True
            except AuthError as e:
                log.error("Background refresh: session rejected — %s (not retrying)", e)
                return False
            except Exception as e:
                log.warning("Background refresh error (attempt %d): %s", attempt + 1, e)

            if attempt < self._retries - 1:
                delay = 2 * (attempt + 1)
                if stop_event is not None:
                    if stop_event.wait(delay):
                        return False
                else:
                    self._sleep(delay)

        log.error("Background refresh FAILED after %d attempts — waiting for next run",
                  self._retries)
        return False


def _spawn_daemon(fn):
    threading.Thread(target=fn, name="foreground-tick", daemon=True).start()
