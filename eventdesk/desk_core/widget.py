"""
DeskWidget — the always-on-top money widget (`eventdesk --widget`).

Runs as its own small process so it keeps showing the last known total
while the dashboard is closed. It never fetches: it re-reads WidgetStore,
which every poll tick (foreground or background) keeps current. Clicking
it opens the dashboard.
"""

import subprocess
import sys
import tkinter as tk

from .constants import THEME, WIDGET_REFRESH_SEC
from .config import log
from .store import KeyValueStore, WidgetStore


def launch_dashboard(milestone=None):
    """
    Start the dashboard process; single-instance guard drops duplicates.
    With a milestone the dashboard opens on its celebration.
    """
    if getattr(sys, 'frozen', False):
        cmd = [sys.executable]
    else:
        cmd = [sys.executable, "-m", "desk_core"]
    if milestone:
        cmd += ["--milestone", str(milestone)]
    subprocess.Popen(cmd, close_fds=True)
    log.info("Dashboard launched%s", f" for milestone {milestone}" if milestone else "")


class DeskWidget:

    def __init__(self, widget_store, on_open=launch_dashboard,
                 refresh_sec=WIDGET_REFRESH_SEC):
        self._store = widget_store
        self._on_open = on_open
        self._refresh_ms = int(refresh_sec * 1000)
        self._root = None
        self._text = None

    def run(self):
        self._root = tk.Tk()
        self._root.title("EventDesk")
        self._root.attributes("-topmost", True)
        self._root.resizable(False, False)
        self._root.configure(bg=THEME["bg_card"], padx=14, pady=10, cursor="hand2")

        tk.Label(self._root, text="Total collected", font=("Segoe UI", 9),
                 fg=THEME["text_muted"], bg=THEME["bg_card"]).pack(anchor="w")
        self._text = tk.Label(self._root, text=self._store.get(),
                              font=("Segoe UI", 22, "bold"),
                              fg=THEME["success"], bg=THEME["bg_card"])
        self._text.pack(anchor="w")

        for widget in (self._root, *self._root.winfo_children()):
            widget.bind("<Button-1>", lambda e: self._on_open())

        self._root.after(self._refresh_ms, self._refresh)
        log.info("Desk widget started (refresh every %ds)", self._refresh_ms // 1000)
        self._root.mainloop()

    def _refresh(self):
        try:
            self._text.config(text=self._store.get())
        except Exception as e:
            log.warning("Widget refresh failed: %s", e)
        self._root.after(self._refresh_ms, self._refresh)


def run_widget():
    DeskWidget(WidgetStore(KeyValueStore())).run()
