"""
BackgroundScheduler — unique, named periodic jobs on daemon threads.

Independent of the dashboard's visibility: hiding the window never touches
these. Registering a name that is already scheduled replaces the old
registration (its thread is stopped), so there is at most one background
schedule per name. Each job's last run time is persisted, so after a
restart the first run is due at last_run + interval rather than
immediately or a full interval later.
"""

import threading
import time

from .constants import KEY_SCHEDULE_LAST_RUN
from .config import log


class _Registration:

    def __init__(self, name, interval_sec, job):
        self.name = name
        self.interval_sec = interval_sec
        self.job = job
        self.stop = threading.Event()
        self.thread = None
        self.runs = 0


class BackgroundScheduler:

    def __init__(self, store, clock=time.time):
        self._store = store
        self._clock = clock
        self._lock = threading.Lock()
        self._jobs = {}

    def enqueue_unique_periodic(self, name, interval_sec, job):
        """Schedule job(stop_event) every interval_sec. Replaces any `name` already scheduled."""
        if interval_sec <= 0:
            raise ValueError(f"interval_sec must be positive, got {interval_sec}")

        reg = _Registration(name, interval_sec, job)
        with self._lock:
            old = self._jobs.pop(name, None)
            self._jobs[name] = reg
        if old is not None:
            old.stop.set()
            log.info("Background job %s re-registered — previous schedule replaced", name)

        delay = self._initial_delay(name, interval_sec)
        reg.thread = threading.Thread(
            target=self._run, args=(reg, delay), name=f"bg-{name}", daemon=True,
        )
        reg.thread.start()
        log.info("Background job %s scheduled every %ds (first run in %.0fs)",
                 name, interval_sec, delay)
        return reg

    def is_scheduled(self, name):
        with self._lock:
            return name in self._jobs

    def scheduled(self):
        with self._lock:
            return sorted(self._jobs)

    def cancel(self, name):
        with self._lock:
            reg = self._jobs.pop(name, None)
        if reg is None:
            return False
        reg.stop.set()
        log.info("Background job %s cancelled", name)
        return True

    def shutdown(self, timeout=2.0):
        with self._lock:
            regs = list(self._jobs.values())
            self._jobs.clear()
        for reg in regs:
            reg.stop.set()
        for reg in regs:
            if reg.thread is not None and reg.thread is not threading.current_thread():
                reg.thread.join(timeout)

    def last_run(self, name):
        raw = self._store.get(KEY_SCHEDULE_LAST_RUN.format(name=name))
        try:
            return float(raw) if raw is not None else None
        except ValueError:
            return None

    def _initial_delay(self, name, interval_sec):
        last = self.last_run(name)
        if last is None:
            return 0.0
        return min(max(0.0, last + interval_sec - self._clock()), float(interval_sec))

    def _run(self, reg, delay):
        if reg.stop.wait(delay):
            return
        while True:
            reg.runs += 1
            try:
                self._store.set(KEY_SCHEDULE_LAST_RUN.format(name=reg.name), self._clock())
                reg.job(reg.stop)
            except Exception as e:
                log.error("Background job %s crashed: %s", reg.name, e, exc_info=True)
            if reg.stop.wait(reg.interval_sec):
                return
