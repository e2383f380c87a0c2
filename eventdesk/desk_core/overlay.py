"""
CelebrationOverlay — live surface drawn over the dashboard window.

Registered with the SurfaceRegistry only while the dashboard is mapped.
Auto-dismisses after OVERLAY_DISMISS_MS or on click. Main thread only.
"""

import tkinter as tk

from .constants import THEME, OVERLAY_DISMISS_MS
from .config import log
from .animation import load_gif_frames, GifPlayer
from .fanout import milestone_message


class CelebrationOverlay:

    def __init__(self, parent, animation_file, metric="registrations"):
        self._parent = parent
        self._animation_file = animation_file
        self._metric = metric
        self._frame = None
        self._player = None
        self._dismiss_job = None

    @property
    def is_visible(self):
        return self._frame is not None

    def announce(self, threshold):
        """Animation + message. Raises AssetError if the animation is missing."""
        self.hide()
        self._build(threshold)
        frames = load_gif_frames(self._parent, self._animation_file)
        self._player = GifPlayer(self._image_label, frames, loops=0)
        self._player.play()
        log.info("Celebration overlay shown for %d", threshold)

    def announce_text(self, threshold):
        if self._frame is None:
            self._build(threshold)
        self._image_label.pack_forget()
        log.info("Celebration overlay shown (text only) for %d", threshold)

    def hide(self):
        if self._dismiss_job is not None:
            try:
                self._parent.after_cancel(self._dismiss_job)
            except tk.TclError:
                pass
            self._dismiss_job = None
        if self._player is not None:
            self._player.stop()
            self._player = None
        if self._frame is not None:
            try:
                self._frame.destroy()
            except tk.TclError:
                pass
            self._frame = None

    def _build(self, threshold):
        frame = tk.Frame(self._parent, bg=THEME["bg_darkest"], cursor="hand2")
        frame.place(relx=0, rely=0, relwidth=1, relheight=1)
        frame.lift()
        self._frame = frame

        inner = tk.Frame(frame, bg=THEME["bg_darkest"])
        inner.place(relx=0.5, rely=0.5, anchor="center")
        self._image_label = tk.Label(inner, bg=THEME["bg_darkest"])
        self._image_label.pack()
        text = tk.Label(inner, text=milestone_message(threshold, self._metric),
                        font=("Segoe UI", 24, "bold"),
                        fg=THEME["celebrate"], bg=THEME["bg_darkest"])
        text.pack(pady=(12, 0))
        tk.Label(inner, text="Tap anywhere to close", font=("Segoe UI", 9),
                 fg=THEME["text_muted"], bg=THEME["bg_darkest"]).pack(pady=(8, 0))

        for widget in (frame, inner, self._image_label, text):
            widget.bind("<Button-1>", lambda e: self.hide())

        self._dismiss_job = self._parent.after(OVERLAY_DISMISS_MS, self.hide)
