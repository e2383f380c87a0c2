"""
DeskApp — the dashboard window and everything wired to it.

The Tk root IS the dashboard. While it is mapped:
  - the ForegroundPoller ticks every 5s
  - the CelebrationOverlay is registered as a live surface
Unmapping (minimise, hide) pauses the former and unregisters the latter.

Always on, independent of the window:
  - BackgroundScheduler job "widget_update" (~15 min)
  - system notification toasts and the full-screen celebration

Worker threads never touch Tk; they post through the UiDispatcher.
"""

import time
import tkinter as tk
from tkinter import messagebox

from .constants import (
    DESK_VERSION, THEME, BACKGROUND_JOB_NAME, BACKGROUND_RETRIES, DEEP_LINK_DELAY_MS,
)
from .config import log, safe_print, save_config
from .errors import AuthError, ParseError
from .state import DeskState
from .store import KeyValueStore, WidgetStore, format_amount
from .api import SnapshotSource
from .milestones import MilestoneTracker
from .fanout import SurfaceRegistry, NotificationFanout, deliver
from .dispatch import UiDispatcher
from .notifications import SystemNotifier
from .toast import ToastPresenter
from .overlay import CelebrationOverlay
from .celebration import CelebrationScreen
from .ticker import IdentifierTicker
from .poller import MilestonePipeline, ForegroundPoller, BackgroundRefresh
from .scheduler import BackgroundScheduler

_SESSION_RESET_AFTER = 3      # consecutive failures before recreating the HTTP session


def connection_status(seconds_since_success):
    """Status line for a failed tick, with the age of the figures on screen."""
    if seconds_since_success is None:
        return "Cannot connect to server. Check network."
    minutes, seconds = divmod(int(seconds_since_success), 60)
    age = f"{minutes}m {seconds}s" if minutes else f"{seconds}s"
    return f"Cannot connect to server. Showing data from {age} ago."


class DeskApp:

    def __init__(self, config, store=None, os_schedule=False):
        self._config = config
        self._os_schedule = os_schedule
        self.state = DeskState()
        self._store = store or KeyValueStore()
        self.tracker = MilestoneTracker(self._store)
        self.widget_store = WidgetStore(self._store)
        self.registry = SurfaceRegistry()
        self.dispatcher = UiDispatcher()
        self.scheduler = BackgroundScheduler(self._store)
        self._source = SnapshotSource(config)
        self._metric = config.get("milestoneMetric", "registrations")

        self._root = None
        self._body = None
        self._labels = {}
        self._overlay = None
        self._notifier = None
        self._poller = None
        self._ticker = None

    # ─── Lifecycle ───────────────────────────────────────────

    def run(self, initial_milestone=None):
        """Build the window and block on the Tk mainloop. Main thread only."""
        self._root = tk.Tk()
        self._build_ui()
        self.dispatcher.attach(self._root.after)

        self._notifier = SystemNotifier(ToastPresenter(self._root), self.open_dashboard,
                                        metric=self._metric)
        fanout = NotificationFanout(self.registry, dispatch=self.dispatcher.call)
        fanout.add_permanent("notification", self._notifier)
        if self._config.get("celebrationScreen", True):
            fanout.add_permanent("celebration", CelebrationScreen(
                self._root, self._config.get("animationFile"),
                self._config.get("soundFile"), metric=self._metric,
            ))
        self._overlay = CelebrationOverlay(self._body, self._config.get("animationFile"),
                                           metric=self._metric)

        pipeline = MilestonePipeline(
            self.tracker, self.widget_store, fanout,
            threshold_step=self._config["thresholdStep"], metric=self._metric,
        )
        self._ticker = IdentifierTicker(
            lambda text: self._labels["series"].config(text=text),
            self._root.after, self._root.after_cancel,
            prefix=self._config.get("seriesPrefix"),
        )
        self._poller = ForegroundPoller(
            self._source, pipeline, self._root.after, self._root.after_cancel,
            self.dispatcher.post, self._on_snapshot, self._on_fetch_error,
            interval_sec=self._config["foregroundIntervalSec"],
            fetch_timeout=self._config["fetchTimeoutSec"],
        )
        self.start_background(
            BackgroundRefresh(self._source, pipeline, retries=BACKGROUND_RETRIES,
                              fetch_timeout=self._config["fetchTimeoutSec"]),
        )

        self._root.bind("<Map>", self._on_map)
        self._root.bind("<Unmap>", self._on_unmap)
        self._root.protocol("WM_DELETE_WINDOW", self.stop)

        if initial_milestone:
            self.open_dashboard({"show_celebration": True, "milestone": initial_milestone})

        log.info("v%s started (server=%s, step=%d, metric=%s, state=%s)",
                 DESK_VERSION, self._config["serverUrl"],
                 self._config["thresholdStep"], self._metric, self._store.path)
        safe_print("Dashboard running.\n")

        try:
            self._root.mainloop()
        finally:
            self._poller.pause()
            self.scheduler.shutdown()
            log.info("DeskApp shut down.")

    def start_background(self, job):
        """
        Run the background refresh in-process unless the OS scheduler already
        owns it. Returns True if the in-process job was scheduled.
        """
        if self._os_schedule:
            log.info("Background refresh owned by the OS scheduler, no in-process job")
            return False
        self.scheduler.enqueue_unique_periodic(
            BACKGROUND_JOB_NAME, self._config["backgroundIntervalSec"], job,
        )
        return True

    def stop(self):
        try:
            self._root.quit()
        except tk.TclError:
            pass

    # ─── Visibility ──────────────────────────────────────────

    def _on_map(self, event):
        if event.widget is not self._root or self.state.dashboard_visible:
            return
        self.state.dashboard_visible = True
        self.registry.register("overlay", self._overlay)
        if not self.state.auth_expired:
            self._poller.resume()

    def _on_unmap(self, event):
        if event.widget is not self._root or not self.state.dashboard_visible:
            return
        self.state.dashboard_visible = False
        self.registry.unregister("overlay", self._overlay)
        self._overlay.hide()
        self._poller.pause()

    def open_dashboard(self, deep_link=None):
        """Bring the window up; with a milestone attached, celebrate it after a beat."""
        self._root.deiconify()
        self._root.lift()
        self._root.focus_force()
        milestone = (deep_link or {}).get("milestone")
        if (deep_link or {}).get("show_celebration") and milestone:
            self._root.after(DEEP_LINK_DELAY_MS,
                             lambda: deliver("overlay", self._overlay, milestone))

    # ─── Poll results (UI thread) ────────────────────────────

    def _on_snapshot(self, snapshot, crossed):
        previous = self.state.on_snapshot(snapshot)
        self._labels["total"].config(text=str(snapshot.total_count))
        self._labels["today"].config(text=str(snapshot.today_count))
        self._labels["month"].config(text=str(snapshot.period_count))
        self._labels["money"].config(text=format_amount(snapshot.total_amount))
        self._ticker.on_new_value(previous, snapshot.identifier)
        self._set_status(f"Updated {time.strftime('%H:%M:%S')}", THEME["text_muted"])

    def _on_fetch_error(self, error):
        self.state.on_failure()
        if isinstance(error, AuthError):
            self._on_auth_expired()
            return
        if isinstance(error, ParseError):
            self._set_status("Stats unavailable — unexpected response from backend.", THEME["warning"])
        else:
            self._set_status(connection_status(self.state.seconds_since_success), THEME["error"])
        if self.state.last_identifier is None:
            self._labels["series"].config(text="Connection Error")
        if self.state.consecutive_failures % _SESSION_RESET_AFTER == 0:
            log.warning("%d consecutive failures — resetting HTTP session",
                        self.state.consecutive_failures)
            self._source.reset()

    def _on_auth_expired(self):
        """Hand-off point to sign-in: drop the token and stop polling with it."""
        self.state.auth_expired = True
        self._poller.pause()
        if self._config.get("authToken"):
            self._config["authToken"] = None
            try:
                save_config(self._config)
            except OSError as e:
                log.error("Could not clear auth token: %s", e)
        self._set_status("Session expired — sign in again.", THEME["error"])

    # ─── Operator actions ────────────────────────────────────

    def _refresh_now(self):
        self._set_status("Refreshing...", THEME["primary"])
        self._poller.refresh_now()

    def _test_milestone(self):
        """Overlay + notification for the current total. Tracker untouched."""
        snapshot = self.state.last_snapshot
        if snapshot is None:
            self._set_status("No data yet — wait for the first refresh.", THEME["warning"])
            return
        value = snapshot.metric(self._metric)
        deliver("overlay", self._overlay, value)
        deliver("notification", self._notifier, value)

    def _reset_milestone(self):
        last = self.tracker.last_acted_threshold
        if not messagebox.askyesno(
            "Reset milestone",
            f"Last announced milestone is {last:,}.\n"
            "Reset it so the next threshold is announced again?",
            parent=self._root,
        ):
            return
        self.tracker.reset()
        self._set_status("Milestone state reset.", THEME["warning"])

    def _set_status(self, text, colour):
        self._labels["status"].config(text=text, fg=colour)

    # ─── UI construction ─────────────────────────────────────

    def _build_ui(self):
        root = self._root
        root.title("EventDesk — Registration Dashboard")
        root.configure(bg=THEME["bg_dark"])
        root.geometry("720x460")
        root.minsize(560, 400)

        menubar = tk.Menu(root)
        actions = tk.Menu(menubar, tearoff=False)
        actions.add_command(label="Refresh now", command=self._refresh_now)
        actions.add_command(label="Test milestone", command=self._test_milestone)
        actions.add_separator()
        actions.add_command(label="Reset milestone...", command=self._reset_milestone)
        actions.add_separator()
        actions.add_command(label="Quit", command=self.stop)
        menubar.add_cascade(label="Desk", menu=actions)
        root.config(menu=menubar)

        header = tk.Frame(root, bg=THEME["header_bg"], height=96)
        header.pack(fill="x")
        header.pack_propagate(False)
        tk.Label(header, text="Current Series ID", font=("Segoe UI", 10),
                 fg=THEME["text_muted"], bg=THEME["header_bg"]).pack(pady=(12, 0))
        self._labels["series"] = tk.Label(header, text="—", font=("Consolas", 28, "bold"),
                                          fg="white", bg=THEME["header_bg"])
        self._labels["series"].pack()

        # Overlay is placed over this frame, so it covers the cards but not the header.
        self._body = tk.Frame(root, bg=THEME["bg_dark"], padx=24, pady=20)
        self._body.pack(fill="both", expand=True)
        for col in range(2):
            self._body.grid_columnconfigure(col, weight=1, uniform="card")

        cards = (
            ("total", "Total Registrations", 0, 0),
            ("today", "Today", 0, 1),
            ("month", "This Month", 1, 0),
            ("money", "Total Collected", 1, 1),
        )
        for key, title, row, col in cards:
            card = tk.Frame(self._body, bg=THEME["bg_card"], padx=18, pady=14,
                            highlightbackground=THEME["border"], highlightthickness=1)
            card.grid(row=row, column=col, sticky="nsew", padx=8, pady=8)
            tk.Label(card, text=title, font=("Segoe UI", 10),
                     fg=THEME["text_secondary"], bg=THEME["bg_card"]).pack(anchor="w")
            self._labels[key] = tk.Label(card, text="—", font=("Segoe UI", 24, "bold"),
                                         fg=THEME["text_primary"], bg=THEME["bg_card"])
            self._labels[key].pack(anchor="w")
        self._labels["money"].config(text=self.widget_store.get(), fg=THEME["success"])

        self._labels["status"] = tk.Label(root, text="Connecting...", font=("Segoe UI", 9),
                                          fg=THEME["text_muted"], bg=THEME["bg_dark"], anchor="w")
        self._labels["status"].pack(fill="x", padx=24, pady=(0, 10))
