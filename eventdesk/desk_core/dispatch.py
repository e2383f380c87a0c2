"""
UiDispatcher — marshals work from fetch/background threads onto the Tk thread.

Worker threads post() callables into a queue; the Tk main loop drains it
every DISPATCH_POLL_MS via root.after(). Nothing outside the main thread
ever touches a widget.
"""

import queue
import threading

from .constants import DISPATCH_POLL_MS
from .config import log


class UiDispatcher:

    def __init__(self):
        self._queue = queue.Queue()
        self._ui_thread = None
        self._after = None

    def attach(self, after):
        """Bind to the Tk main loop. Call from the main thread."""
        self._ui_thread = threading.get_ident()
        self._after = after
        self._after(DISPATCH_POLL_MS, self._poll)

    @property
    def on_ui_thread(self):
        return threading.get_ident() == self._ui_thread

    def post(self, fn, *args):
        """Run fn(*args) on the UI thread. Safe from any thread."""
        self._queue.put((fn, args))

    def call(self, fn, *args):
        """Run now if already on the UI thread, otherwise post()."""
        if self.on_ui_thread:
            fn(*args)
        else:
            self.post(fn, *args)

    def drain(self, limit=100):
        """Run up to `limit` queued callables. Returns how many ran."""
        ran = 0
        while ran < limit:
            try:
                fn, args = self._queue.get_nowait()
            except queue.Empty:
                break
            ran += 1
            try:
                fn(*args)
            except Exception as e:
                log.error("UI dispatch error in %s: %s",
                          getattr(fn, "__qualname__", fn), e, exc_info=True)
        return ran

    def _poll(self):
        self.drain()
        self._after(DISPATCH_POLL_MS, self._poll)


class ImmediateDispatcher:
    """Dispatcher for headless runs (--background-once): no UI thread to hop to."""

    on_ui_thread = True

    def post(self, fn, *args):
        fn(*args)

    call = post
