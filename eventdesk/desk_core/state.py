"""
Snapshot value type and DeskState, the dashboard's UI-thread state.

DeskState is only touched on the Tkinter main thread. Shared, persisted
state (milestone threshold, widget text) lives in store.py instead.
"""

import time
from dataclasses import dataclass


@dataclass(frozen=True)
class Snapshot:
    """One fetched copy of the backend aggregate counters."""
    total_count: int
    identifier: str
    today_count: int = 0
    period_count: int = 0
    total_amount: int = 0
    fetched_at: float = 0.0

    def metric(self, name):
        """Counter the milestone policy tracks: 'registrations' or 'money'."""
        if name == "money":
            return self.total_amount
        return self.total_count


@dataclass
class DeskState:
    # ── Visibility (drives the foreground schedule) ───────────
    dashboard_visible: bool = False

    # ── Last rendered values ──────────────────────────────────
    last_identifier: str = None
    last_snapshot: Snapshot = None
    last_success_time: float = 0.0

    # ── Failure tracking ──────────────────────────────────────
    consecutive_failures: int = 0
    auth_expired: bool = False

    def on_snapshot(self, snapshot):
        """Record a successful tick. Returns the identifier shown before it."""
        previous = self.last_identifier
        self.last_snapshot = snapshot
        self.last_identifier = snapshot.identifier
        self.last_success_time = time.time()
        self.consecutive_failures = 0
        return previous

    def on_failure(self):
        self.consecutive_failures += 1

    @property
    def seconds_since_success(self):
        if not self.last_success_time:
            return None
        return time.time() - self.last_success_time
