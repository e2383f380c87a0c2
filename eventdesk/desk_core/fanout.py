"""
NotificationFanout — one crossed threshold, every available surface.

Surfaces come in two kinds:
  live      — exist only while their host window is up (the dashboard
              overlay). They register/unregister with the SurfaceRegistry;
              an unregistered surface is skipped, nothing is queued for it.
  permanent — always attempted (system notification, full-screen
              celebration when enabled).

A surface implements announce(threshold) and announce_text(threshold).
If announce() raises, that surface alone degrades to announce_text().
"""

import threading

from .config import log
from .errors import AssetError


def milestone_message(threshold, metric="registrations"):
    """'🎉 100,000 Registrations! 🎉' (or the money form)."""
    if metric == "money":
        return f"\U0001F389 ₹{threshold:,} Collected! \U0001F389"
    return f"\U0001F389 {threshold:,} Registrations! \U0001F389"


class SurfaceRegistry:
    """Thread-safe set of currently-live surfaces, keyed by name."""

    def __init__(self):
        self._lock = threading.Lock()
        self._surfaces = {}

    def register(self, name, surface):
        with self._lock:
            self._surfaces[name] = surface
        log.info("Live surface registered: %s", name)

    def unregister(self, name, surface=None):
        """Remove `name`. If `surface` is given, only remove that exact instance."""
        with self._lock:
            current = self._surfaces.get(name)
            if current is None or (surface is not None and current is not surface):
                return False
            del self._surfaces[name]
        log.info("Live surface unregistered: %s", name)
        return True

    def is_live(self, name):
        with self._lock:
            return name in self._surfaces

    def live(self):
        with self._lock:
            return list(self._surfaces.items())


class NotificationFanout:

    def __init__(self, registry, permanent=(), dispatch=None):
        """
        registry  — SurfaceRegistry of live surfaces
        permanent — [(name, surface)] always attempted
        dispatch  — callable(fn, *args) running fn on the UI thread
                    (UiDispatcher.call); None runs inline
        """
        self._registry = registry
        self._permanent = list(permanent)
        self._dispatch = dispatch

    def add_permanent(self, name, surface):
        self._permanent.append((name, surface))

    def announce(self, threshold):
        targets = self._registry.live() + self._permanent
        log.info("Announcing milestone %d to %s", threshold,
                 ", ".join(name for name, _ in targets) or "no surfaces")
        for name, surface in targets:
            if self._dispatch is None:
                deliver(name, surface, threshold)
            else:
                self._dispatch(deliver, name, surface, threshold)


def deliver(name, surface, threshold):
    """Announce on one surface; on any failure fall back to its text form. Never raises."""
    try:
        surface.announce(threshold)
        return True
    except AssetError as e:
        log.warning("Surface %s missing asset (%s) — text only", name, e)
    except Exception as e:
        log.error("Surface %s failed: %s — text only", name, e, exc_info=True)

    try:
        surface.announce_text(threshold)
    except Exception as e:
        log.error("Surface %s text fallback failed: %s", name, e)
    return False
