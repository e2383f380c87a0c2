"""
desk_core — Event Registration Desk Dashboard v1.4
==================================================
Architecture: Tkinter main-thread event loop. Workers post results back
through the UiDispatcher; nothing but the UI thread touches Tk.

  constants.py     → Version, intervals, notification channel, theme
  config.py        → Paths, logging, config load/save, helpers
  errors.py        → NetworkError / ParseError / AuthError / AssetError
  http_client.py   → HTTP session with retry/pooling + certifi CAs
  state.py         → Snapshot + DeskState (UI-side view of the last poll)
  api.py           → SnapshotSource (GET /stats + /current-series)
  store.py         → SQLite key-value store, WidgetStore
  milestones.py    → MilestoneTracker (atomic check-and-advance)
  fanout.py        → SurfaceRegistry + NotificationFanout
  dispatch.py      → UiDispatcher (thread → Tk marshalling)
  notifications.py → SystemNotifier (channel, replace-by-id, deep link)
  toast.py         → ToastPresenter (Tk toast window)
  sound.py         → Alarm playback per platform
  animation.py     → GIF frame loading/playback
  overlay.py       → CelebrationOverlay (in-dashboard)
  celebration.py   → CelebrationScreen (full screen)
  ticker.py        → IdentifierTicker (animated series id)
  poller.py        → MilestonePipeline, ForegroundPoller, BackgroundRefresh
  scheduler.py     → BackgroundScheduler (unique periodic jobs)
  platform_win.py  → Windows: Task Scheduler, single instance
  widget.py        → DeskWidget (always-on-top money widget)
  app.py           → DeskApp (Tk main loop, root.after scheduling)
  runner.py        → cli(), main() + auto-restart wrapper
"""
