"""
Paths, logging setup, config load/save, safe_print, resource_path.
"""

import os
import json
import sys
import logging
from pathlib import Path

from .constants import (
    DEFAULT_SERVER_URL, THRESHOLD_STEP, MILESTONE_METRICS, SERIES_PREFIX,
    FOREGROUND_INTERVAL_SEC, BACKGROUND_INTERVAL_SEC, FETCH_TIMEOUT_SEC,
)


# ─── Paths ───────────────────────────────────────────────────────
# One data directory per operator account. EVENTDESK_HOME wins so the
# widget process and the background run always share the dashboard's state.
_FOLDER_NAME = "EventDesk"

if os.environ.get("EVENTDESK_HOME"):
    BASE_DIR = Path(os.environ["EVENTDESK_HOME"])
elif sys.platform == "win32":
    BASE_DIR = Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData")) / _FOLDER_NAME
else:
    BASE_DIR = Path.home() / ".eventdesk"

BASE_DIR.mkdir(parents=True, exist_ok=True)

CONFIG_FILE = BASE_DIR / "config.json"
LOG_FILE = BASE_DIR / "desk.log"
STATE_DB = BASE_DIR / "state.db"


def resource_path(relative_path):
    """Get path to a bundled asset (works for both dev and PyInstaller)."""
    if getattr(sys, 'frozen', False):
        base = Path(sys._MEIPASS)
    else:
        base = Path(__file__).parent.parent
    return str(base / relative_path)


# ─── Safe print (no crash when --noconsole) ──────────────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except (OSError, ValueError, AttributeError):
        pass


# ─── Logging ─────────────────────────────────────────────────────

try:
    if LOG_FILE.exists() and LOG_FILE.stat().st_size > 1_000_000:
        LOG_FILE.write_text("")
except OSError:
    pass

logging.basicConfig(
    filename=str(LOG_FILE),
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    encoding="utf-8",
)
log = logging.getLogger("desk")

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
log.addHandler(console_handler)


# ─── Config Management ──────────────────────────────────────────

DEFAULT_CONFIG = {
    "serverUrl": DEFAULT_SERVER_URL,
    "authToken": None,
    "thresholdStep": THRESHOLD_STEP,
    "milestoneMetric": "registrations",
    "seriesPrefix": SERIES_PREFIX,
    "celebrationScreen": True,
    "foregroundIntervalSec": FOREGROUND_INTERVAL_SEC,
    "backgroundIntervalSec": BACKGROUND_INTERVAL_SEC,
    "fetchTimeoutSec": FETCH_TIMEOUT_SEC,
    "animationFile": resource_path("assets/milestone.gif"),
    "soundFile": None,
}

_POSITIVE_INT_KEYS = (
    "thresholdStep", "foregroundIntervalSec", "backgroundIntervalSec", "fetchTimeoutSec",
)


def _normalize(config):
    """Replace invalid values with defaults so a hand-edited file can't break polling."""
    for key in _POSITIVE_INT_KEYS:
        value = config.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            log.warning("Invalid %s=%r in config — using %r", key, value, DEFAULT_CONFIG[key])
            config[key] = DEFAULT_CONFIG[key]

    if config.get("milestoneMetric") not in MILESTONE_METRICS:
        log.warning("Unknown milestoneMetric=%r — using registrations", config.get("milestoneMetric"))
        config["milestoneMetric"] = "registrations"

    config["serverUrl"] = str(config.get("serverUrl") or DEFAULT_SERVER_URL).rstrip("/")
    return config


def load_config():
    """Load config from disk merged over DEFAULT_CONFIG. Always returns a dict."""
    config = dict(DEFAULT_CONFIG)
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, "r", encoding="utf-8") as f:
                stored = json.load(f)
            if isinstance(stored, dict):
                config.update(stored)
            else:
                log.warning("Ignoring %s: top level is not an object", CONFIG_FILE)
        except (json.JSONDecodeError, IOError) as e:
            log.warning("Could not read %s (%s) — using defaults", CONFIG_FILE, e)
    return _normalize(config)


def save_config(config):
    """Save config dict to disk."""
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
    log.info("Config saved to %s", CONFIG_FILE)
