"""
ToastPresenter — desktop rendering of system notifications.

A borderless, topmost Toplevel in the bottom-right corner. Shown whether or
not the dashboard window is mapped (the Tk root stays alive while the
process runs). One toast per notification id: showing an id that is
already up rebuilds it in place.

The channel's vibration pattern (wait, on, off, on, ...) in ms is played
as a border flash, the closest thing a desktop toast has to a buzz.
Main thread only.
"""

import tkinter as tk

from .constants import THEME, TOAST_LIFETIME_MS
from .config import log

_W, _H = 380, 120
_MARGIN = 24


class ToastPresenter:

    def __init__(self, root):
        self._root = root
        self._toasts = {}

    def show(self, notification, on_click):
        self.cancel(notification.notification_id)

        top = tk.Toplevel(self._root)
        self._toasts[notification.notification_id] = top
        top.overrideredirect(True)
        top.attributes("-topmost", True)
        top.configure(bg=THEME["primary"], padx=2, pady=2)

        x = top.winfo_screenwidth() - _W - _MARGIN
        y = top.winfo_screenheight() - _H - _MARGIN * 3
        top.geometry(f"{_W}x{_H}+{x}+{y}")

        card = tk.Frame(top, bg=THEME["bg_card"], padx=16, pady=12)
        card.pack(fill="both", expand=True)
        tk.Label(card, text=notification.title, font=("Segoe UI", 12, "bold"),
                 fg=THEME["celebrate"], bg=THEME["bg_card"], anchor="w").pack(fill="x")
        tk.Label(card, text=notification.text, font=("Segoe UI", 11),
                 fg=THEME["text_primary"], bg=THEME["bg_card"],
                 wraplength=_W - 40, justify="left", anchor="w").pack(fill="x", pady=(6, 0))
        tk.Label(card, text=notification.channel.name, font=("Segoe UI", 8),
                 fg=THEME["text_muted"], bg=THEME["bg_card"], anchor="w").pack(fill="x", pady=(6, 0))

        def clicked(_event=None):
            try:
                on_click()
            except Exception as e:
                log.error("Notification click handler failed: %s", e, exc_info=True)

        for widget in (top, card, *card.winfo_children()):
            widget.bind("<Button-1>", clicked)
            widget.configure(cursor="hand2")

        self._flash(top, notification.channel.vibration_pattern)
        top.after(TOAST_LIFETIME_MS, lambda: self._expire(notification.notification_id, top))

    def cancel(self, notification_id):
        top = self._toasts.pop(notification_id, None)
        if top is not None:
            try:
                top.destroy()
            except tk.TclError:
                pass

    def _expire(self, notification_id, top):
        if self._toasts.get(notification_id) is top:
            self.cancel(notification_id)

    def _flash(self, top, pattern):
        """Alternate border colour following the pattern's on/off durations."""
        elapsed = 0
        for i, duration in enumerate(pattern):
            elapsed += duration
            colour = THEME["celebrate"] if i % 2 == 0 else THEME["primary"]
            top.after(elapsed, lambda c=colour: self._set_border(top, c))

    @staticmethod
    def _set_border(top, colour):
        try:
            top.configure(bg=colour)
        except tk.TclError:
            pass
