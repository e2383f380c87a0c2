"""
Entry points: dashboard with auto-restart wrapper, headless background
tick, desk widget, and the operator/maintenance flags.
"""

import argparse
import sys
import time

from .constants import DESK_VERSION, BACKGROUND_RETRIES
from .config import log, safe_print, load_config
from .store import KeyValueStore, WidgetStore
from .api import SnapshotSource
from .milestones import MilestoneTracker
from .fanout import SurfaceRegistry, NotificationFanout
from .dispatch import ImmediateDispatcher
from .poller import MilestonePipeline, BackgroundRefresh
from .platform_win import (
    ensure_single_instance, register_background_task, remove_background_task,
    is_background_task_registered,
)


def main(initial_milestone=None):
    """Dashboard entry point."""
    from .app import DeskApp

    safe_print("EventDesk Registration Dashboard v" + DESK_VERSION)
    safe_print()

    if not ensure_single_instance():
        safe_print("Already running. Exiting.")
        sys.exit(0)

    config = load_config()
    DeskApp(config, os_schedule=ensure_os_schedule(config)).run(initial_milestone=initial_milestone)


def ensure_os_schedule(config):
    """
    True if the OS scheduler owns the background refresh (registered now or
    earlier). The dashboard then runs no in-process background job of its own.
    """
    if is_background_task_registered():
        return True
    return register_background_task(config["backgroundIntervalSec"] // 60 or 1)


def run_with_auto_restart(initial_milestone=None):
    """
    Wrapper that auto-restarts the dashboard on crash.
    Crash counter resets if it ran for 2+ minutes (not a boot-loop).
    """
    crash_count = 0
    crash_window = 120
    max_rapid_crashes = 10

    while True:
        start_time = time.time()
        try:
            main(initial_milestone)
            break
        except KeyboardInterrupt:
            safe_print("\nDashboard stopped by user.")
            break
        except SystemExit as e:
            if e.code in (0, None):
                break
            log.error("Dashboard SystemExit: %s", e)
        except Exception as e:
            elapsed = time.time() - start_time
            log.error("Dashboard crashed after %.0fs: %s", elapsed, e, exc_info=True)

            if elapsed > crash_window:
                crash_count = 0
            crash_count += 1

            if crash_count >= max_rapid_crashes:
                wait = 120
                log.warning("Many rapid crashes (%d). Waiting %ds...", crash_count, wait)
            else:
                wait = min(10 * crash_count, 60)

            log.info("Restarting in %ds (crash %d)...", wait, crash_count)
            time.sleep(wait)
        # A deep link is only honoured by the first launch.
        initial_milestone = None


def run_background_once(config=None, store=None, source=None, notifier=None):
    """
    One background tick without a window (OS scheduler entry). With no UI
    running there are no live surfaces; the notification surface is the
    caller's to supply (None → milestone is logged and recorded only).
    Returns True if a snapshot was processed.
    """
    config = config or load_config()
    store = store or KeyValueStore()
    fanout = NotificationFanout(SurfaceRegistry(), dispatch=ImmediateDispatcher().call)
    if notifier is not None:
        fanout.add_permanent("notification", notifier)
    pipeline = MilestonePipeline(
        MilestoneTracker(store), WidgetStore(store), fanout,
        threshold_step=config["thresholdStep"],
        metric=config.get("milestoneMetric", "registrations"),
    )
    job = BackgroundRefresh(source or SnapshotSource(config), pipeline,
                            retries=BACKGROUND_RETRIES,
                            fetch_timeout=config["fetchTimeoutSec"])
    return job()


def _headless_notifier(config):
    """Toast on a throwaway Tk root; clicking it launches the dashboard."""
    import tkinter as tk
    from .notifications import SystemNotifier
    from .toast import ToastPresenter
    from .widget import launch_dashboard

    root = tk.Tk()
    root.withdraw()
    return root, SystemNotifier(ToastPresenter(root),
                                lambda link: launch_dashboard(link.get("milestone")),
                                metric=config.get("milestoneMetric", "registrations"))


def build_parser():
    parser = argparse.ArgumentParser(prog="eventdesk", description="Event registration desk dashboard")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--widget", action="store_true", help="show the desk money widget only")
    mode.add_argument("--background-once", action="store_true",
                      help="run one background refresh and exit")
    mode.add_argument("--reset-milestone", action="store_true",
                      help="forget announced milestones (operator re-test)")
    mode.add_argument("--install-schedule", action="store_true",
                      help="register the OS background refresh task")
    mode.add_argument("--uninstall-schedule", action="store_true",
                      help="remove the OS background refresh task")
    parser.add_argument("--milestone", type=int, default=None,
                        help="open the dashboard celebrating this milestone")
    parser.add_argument("--version", action="version", version=f"%(prog)s {DESK_VERSION}")
    return parser


def cli(argv=None):
    args = build_parser().parse_args(argv)

    if args.widget:
        from .widget import run_widget
        run_widget()
        return 0

    if args.background_once:
        config = load_config()
        try:
            root, notifier = _headless_notifier(config)
        except Exception as e:
            log.warning("No display for notifications (%s) — refresh only", e)
            return 0 if run_background_once(config) else 1
        ok = run_background_once(config, notifier=notifier)
        if notifier.posted:
            root.after(30000, root.quit)
            root.mainloop()
        root.destroy()
        return 0 if ok else 1

    if args.reset_milestone:
        MilestoneTracker(KeyValueStore()).reset()
        safe_print("Milestone state reset.")
        return 0

    if args.install_schedule:
        config = load_config()
        ok = register_background_task(config["backgroundIntervalSec"] // 60 or 1)
        safe_print("Background task registered." if ok else "Background task not registered.")
        return 0 if ok else 1

    if args.uninstall_schedule:
        ok = remove_background_task()
        safe_print("Background task removed." if ok else "No background task to remove.")
        return 0 if ok else 1

    run_with_auto_restart(initial_milestone=args.milestone)
    return 0
