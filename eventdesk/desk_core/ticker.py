"""
IdentifierTicker — rolls the series id display from the old number to the new one.

"MH26000099" → "MH26000105" counts up through MH26000100, MH26000101, ...
over 1.5s with an accelerate/decelerate curve. Values that don't split into
prefix + digits are shown as-is. Cosmetic only: no persisted state.
"""

import math
import re
import time

from .constants import TICKER_DURATION_MS, TICKER_FRAME_MS

_ALPHA_PREFIX = re.compile(r"^([A-Za-z]+)(\d+)$")


def parse_identifier(value, prefix=None):
    """
    Split an identifier into (prefix, number, width) or return None.

    With a configured prefix ("MH26") the remainder must be all digits.
    Without one, the prefix is the leading run of letters.
    """
    if not value:
        return None
    if prefix:
        if not value.startswith(prefix):
            return None
        digits = value[len(prefix):]
        if not digits.isdigit() or not digits.isascii():
            return None
        return prefix, int(digits), len(digits)

    match = _ALPHA_PREFIX.match(value)
    if not match:
        return None
    digits = match.group(2)
    return match.group(1), int(digits), len(digits)


def ease_in_out(fraction):
    """Accelerate/decelerate interpolation: slow start, fast middle, slow end."""
    fraction = min(max(fraction, 0.0), 1.0)
    return math.cos((fraction + 1) * math.pi) / 2.0 + 0.5


class IdentifierTicker:
    """
    render(text)            — writes the label; called on the UI thread
    after(ms, callback)     — Tk-style scheduler returning a cancel handle
    after_cancel(handle)
    """

    def __init__(self, render, after, after_cancel, prefix=None,
                 duration_ms=TICKER_DURATION_MS, frame_ms=TICKER_FRAME_MS, clock=time.monotonic):
        self._render = render
        self._after = after
        self._after_cancel = after_cancel
        self._prefix = prefix
        self._duration_ms = duration_ms
        self._frame_ms = frame_ms
        self._clock = clock
        self._pending = None

    @property
    def animating(self):
        return self._pending is not None

    def on_new_value(self, previous, next_value):
        self.cancel()

        if previous is None or previous == next_value:
            self._render(next_value)
            return

        old = parse_identifier(previous, self._prefix)
        new = parse_identifier(next_value, self._prefix)
        if old is None or new is None or old[0] != new[0]:
            self._render(next_value)
            return

        prefix, start, _ = old
        _, end, width = new
        started = self._clock()
        self._frame(prefix, start, end, width, next_value, started)

    def cancel(self):
        if self._pending is not None:
            self._after_cancel(self._pending)
            self._pending = None

    def _frame(self, prefix, start, end, width, final_text, started):
        self._pending = None
        elapsed_ms = (self._clock() - started) * 1000.0
        fraction = elapsed_ms / self._duration_ms if self._duration_ms else 1.0

        if fraction >= 1.0:
            self._render(final_text)
            return

        value = int(start + (end - start) * ease_in_out(fraction))
        self._render(f"{prefix}{value:0{width}d}")
        self._pending = self._after(
            self._frame_ms,
            lambda: self._frame(prefix, start, end, width, final_text, started),
        )
