"""
Constants, intervals, milestone policy, notification channel and theme.
"""

DESK_VERSION = "1.4.0"

# ─── Backend ─────────────────────────────────────────────────────
DEFAULT_SERVER_URL = "https://mahotsav-app-backend.onrender.com/api"
STATS_PATH = "/stats"
SERIES_PATH = "/current-series"

# ─── Schedules ───────────────────────────────────────────────────
FOREGROUND_INTERVAL_SEC = 5      # Dashboard auto-refresh while visible
BACKGROUND_INTERVAL_SEC = 900    # Background refresh (~15 min)
BACKGROUND_JOB_NAME = "widget_update"
FETCH_TIMEOUT_SEC = 10           # Hard cap on one tick's fetch
BACKGROUND_RETRIES = 3           # Attempts per background tick
DISPATCH_POLL_MS = 100           # UI queue drain interval
WIDGET_REFRESH_SEC = 30

# ─── Milestone policy ────────────────────────────────────────────
THRESHOLD_STEP = 100_000
MILESTONE_METRICS = ("registrations", "money")

# ─── Announcement surfaces ───────────────────────────────────────
OVERLAY_DISMISS_MS = 8000
CELEBRATION_LOOPS = 3
DEEP_LINK_DELAY_MS = 1000
SERIES_PREFIX = "MH26"
TICKER_DURATION_MS = 1500
TICKER_FRAME_MS = 16
CURRENCY_SYMBOL = "₹"

NOTIFICATION_ID = 1000
CHANNEL_ID = "milestone_celebrations"
CHANNEL_NAME = "Milestone Celebrations"
CHANNEL_DESCRIPTION = "Notifications for registration milestones"
VIBRATION_PATTERN = (0, 1000, 500, 1000)
TOAST_LIFETIME_MS = 30000

# ─── Persisted state keys ────────────────────────────────────────
KEY_LAST_THRESHOLD = "milestone.lastActedThreshold"
KEY_WIDGET_TEXT = "widget.displayText"
KEY_SCHEDULE_LAST_RUN = "schedule.{name}.lastRunAt"

# ─── Theme (dark dashboard) ──────────────────────────────────────
THEME = {
    "bg_darkest":    "#020617",   # fullscreen celebration
    "bg_dark":       "#0f172a",   # window bg
    "bg_card":       "#1e293b",   # stat cards
    "header_bg":     "#0a2c54",   # header
    "primary":       "#3b82f6",
    "text_primary":  "#f1f5f9",
    "text_secondary": "#cbd5e1",
    "text_muted":    "#94a3b8",
    "border":        "#374151",
    "success":       "#22c55e",
    "error":         "#ef4444",
    "warning":       "#fbbf24",
    "celebrate":     "#f59e0b",
}
