"""
Windows-specific functionality:
  - Background refresh task (Task Scheduler, every 15 minutes)
  - Single dashboard instance (named mutex)

On other platforms the background schedule is the in-process
BackgroundScheduler only, and every instance check passes.
"""

import os
import sys
import ctypes
import subprocess

from .config import log

_TASK_NAME = "EventDesk Milestone Refresh"
_MUTEX_NAME = "Local\\EventDeskDashboard_4c1e"
_ERROR_ALREADY_EXISTS = 183


def _launch_command():
    """Command line that runs one background tick headless."""
    if getattr(sys, 'frozen', False):
        return f'"{sys.executable}" --background-once'
    pythonw = os.path.join(os.path.dirname(sys.executable), "pythonw.exe")
    return f'"{pythonw}" -m desk_core --background-once'


# ─── Background task via Task Scheduler ──────────────────────────

def register_background_task(interval_min=15):
    """
    Create (or replace — /F) the periodic background task. Re-running this
    never stacks a second task. Returns True on success.
    """
    if sys.platform != "win32":
        return False

    cmd = [
        "schtasks", "/Create",
        "/TN", _TASK_NAME,
        "/TR", _launch_command(),
        "/SC", "MINUTE",
        "/MO", str(interval_min),
        "/RL", "LIMITED",
        "/F",
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=15)
    except (OSError, subprocess.SubprocessError) as e:
        log.warning("Task Scheduler error: %s", e)
        return False
    if result.returncode == 0:
        log.info("Background task registered: %s (every %d min)", _TASK_NAME, interval_min)
        return True
    log.warning("schtasks /Create failed (%d): %s", result.returncode, result.stderr.strip()[:200])
    return False


def remove_background_task():
    """The uninstall action: the only thing that cancels the OS-level schedule."""
    if sys.platform != "win32":
        return False
    try:
        result = subprocess.run(
            ["schtasks", "/Delete", "/TN", _TASK_NAME, "/F"],
            capture_output=True, text=True, timeout=10,
        )
    except (OSError, subprocess.SubprocessError) as e:
        log.warning("Task Scheduler error: %s", e)
        return False
    if result.returncode == 0:
        log.info("Background task removed: %s", _TASK_NAME)
        return True
    return False


def is_background_task_registered():
    if sys.platform != "win32":
        return False
    try:
        result = subprocess.run(
            ["schtasks", "/Query", "/TN", _TASK_NAME],
            capture_output=True, text=True, timeout=10,
        )
    except (OSError, subprocess.SubprocessError):
        return False
    return result.returncode == 0


# ─── Single Instance Lock ────────────────────────────────────────

_instance_mutex = None


def ensure_single_instance():
    """Prevent a second dashboard using a Windows named mutex."""
    global _instance_mutex
    if sys.platform != "win32":
        return True

    try:
        _instance_mutex = ctypes.windll.kernel32.CreateMutexW(None, False, _MUTEX_NAME)
        if ctypes.windll.kernel32.GetLastError() == _ERROR_ALREADY_EXISTS:
            log.info("Another dashboard is already running.")
            return False
        return True
    except (OSError, AttributeError):
        return True
