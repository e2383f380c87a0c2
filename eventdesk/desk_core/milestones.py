"""
MilestoneTracker — the single authority on "has this threshold been announced".

The foreground poller and the background schedule both call
check_and_advance() for every snapshot they see, possibly at the same
moment and possibly from different processes. The read-compare-write runs
under a process-wide lock AND inside one BEGIN IMMEDIATE transaction, so
exactly one caller gets the crossed threshold back.
"""

import threading

from .constants import KEY_LAST_THRESHOLD
from .config import log

# Shared by every tracker in the process, whatever store instance it wraps.
_advance_lock = threading.Lock()


def threshold_for(total_count, threshold_step):
    """Highest multiple of threshold_step that total_count has reached."""
    if threshold_step <= 0:
        raise ValueError(f"threshold_step must be positive, got {threshold_step}")
    return (total_count // threshold_step) * threshold_step


class MilestoneTracker:

    def __init__(self, store):
        self._store = store

    @property
    def last_acted_threshold(self):
        return self._store.get_int(KEY_LAST_THRESHOLD, 0)

    def check_and_advance(self, total_count, threshold_step):
        """
        Advance past a newly crossed threshold.

        Returns the crossed threshold, or None if nothing new was reached or
        another caller already claimed it. State is untouched on None.
        """
        candidate = threshold_for(total_count, threshold_step)
        if candidate <= 0:
            return None

        with _advance_lock, self._store.transaction() as tx:
            last = tx.get_int(KEY_LAST_THRESHOLD, 0)
            if candidate > last and total_count >= candidate:
                tx.set(KEY_LAST_THRESHOLD, candidate)
                log.info("Milestone crossed: %d (previous %d, total %d)",
                         candidate, last, total_count)
                return candidate
        return None

    def reset(self):
        """Operator re-test: forget every announced threshold."""
        with _advance_lock, self._store.transaction() as tx:
            previous = tx.get_int(KEY_LAST_THRESHOLD, 0)
            tx.set(KEY_LAST_THRESHOLD, 0)
        log.warning("Milestone state reset by operator (was %d)", previous)
