"""
CelebrationScreen — full-screen milestone presentation.

Fullscreen topmost Toplevel, the animation played CELEBRATION_LOOPS times
and the alarm sound at full volume. Click, Escape or BackSpace closes it.
Main thread only; a second announce() replaces the screen that is up.
"""

import tkinter as tk

from .constants import THEME, CELEBRATION_LOOPS
from .config import log
from .animation import load_gif_frames, GifPlayer
from .errors import AssetError
from .fanout import milestone_message
from . import sound


class CelebrationScreen:

    def __init__(self, root, animation_file, sound_file, metric="registrations"):
        self._root = root
        self._animation_file = animation_file
        self._sound_file = sound_file
        self._metric = metric
        self._top = None
        self._player = None
        self._sound_proc = None

    @property
    def is_visible(self):
        return self._top is not None

    def announce(self, threshold):
        """
        Raises AssetError when the animation or the sound is missing. The
        window stays up either way; announce_text() then fills it in.
        """
        self.dismiss()
        image_label = self._build(threshold)

        missing = []
        try:
            frames = load_gif_frames(self._top, self._animation_file)
            self._player = GifPlayer(image_label, frames, loops=CELEBRATION_LOOPS)
            self._player.play()
        except AssetError as e:
            missing.append(str(e))

        try:
            self._sound_proc = sound.play_alarm(self._sound_file)
        except AssetError as e:
            missing.append(str(e))

        if missing:
            raise AssetError("; ".join(missing))
        log.info("Full-screen celebration shown for %d", threshold)

    def announce_text(self, threshold):
        if self._top is None:
            self._build(threshold)
        log.info("Full-screen celebration shown (degraded) for %d", threshold)

    def dismiss(self):
        if self._player is not None:
            self._player.stop()
            self._player = None
        if self._sound_proc is not None:
            sound.stop(self._sound_proc)
            self._sound_proc = None
        if self._top is not None:
            try:
                self._top.destroy()
            except tk.TclError:
                pass
            self._top = None

    def _build(self, threshold):
        top = tk.Toplevel(self._root)
        self._top = top
        top.title("Milestone!")
        top.configure(bg=THEME["bg_darkest"], cursor="hand2")
        top.attributes("-fullscreen", True)
        top.attributes("-topmost", True)
        top.protocol("WM_DELETE_WINDOW", self.dismiss)

        top.grid_rowconfigure(0, weight=1)
        top.grid_columnconfigure(0, weight=1)
        body = tk.Frame(top, bg=THEME["bg_darkest"])
        body.grid(row=0, column=0)

        image_label = tk.Label(body, bg=THEME["bg_darkest"])
        image_label.pack()
        tk.Label(body, text=milestone_message(threshold, self._metric),
                 font=("Segoe UI", 40, "bold"),
                 fg=THEME["celebrate"], bg=THEME["bg_darkest"]).pack(pady=(24, 0))

        for widget in (top, body, *body.winfo_children()):
            widget.bind("<Button-1>", lambda e: self.dismiss())
        top.bind("<Escape>", lambda e: self.dismiss())
        top.bind("<BackSpace>", lambda e: self.dismiss())
        top.focus_force()
        return image_label
