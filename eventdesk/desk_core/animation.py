"""
Animated GIF playback on a Tk Label (celebration overlay and full screen).
Main thread only.
"""

import tkinter as tk
from pathlib import Path

from .errors import AssetError

_FRAME_MS = 40
_MAX_FRAMES = 500


def load_gif_frames(master, path):
    """Read every frame of a GIF. Raises AssetError if missing or unreadable."""
    if not path or not Path(path).is_file():
        raise AssetError(f"animation not found: {path}")

    frames = []
    while len(frames) < _MAX_FRAMES:
        try:
            frames.append(tk.PhotoImage(master=master, file=str(path),
                                        format=f"gif -index {len(frames)}"))
        except tk.TclError:
            break
    if not frames:
        raise AssetError(f"animation unreadable: {path}")
    return frames


class GifPlayer:
    """Plays frames on a label `loops` times (0 = forever)."""

    def __init__(self, label, frames, loops=1, frame_ms=_FRAME_MS):
        self._label = label
        self._frames = frames
        self._loops = loops
        self._frame_ms = frame_ms
        self._job = None
        self._index = 0
        self._played = 0

    def play(self):
        self.stop()
        self._index = 0
        self._played = 0
        self._step()

    def stop(self):
        if self._job is not None:
            try:
                self._label.after_cancel(self._job)
            except tk.TclError:
                pass
            self._job = None

    def _step(self):
        self._job = None
        try:
            self._label.configure(image=self._frames[self._index])
        except tk.TclError:
            return                               # label destroyed mid-animation
        self._index += 1
        if self._index >= len(self._frames):
            self._index = 0
            self._played += 1
            if self._loops and self._played >= self._loops:
                return
        self._job = self._label.after(self._frame_ms, self._step)
