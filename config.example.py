# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "WORK_TRACKER_APP_NAME": "App display name (default: work-tracker).",
    "WORK_TRACKER_LOG_LEVEL": "Console logging level (default: INFO).",
    # Ticker
    "WORK_TRACKER_TICKER_ENABLED": "Run the background ticker that refreshes the running session (true/false).",
    "WORK_TRACKER_TICK_INTERVAL_SECONDS": "Seconds between ticker refreshes (default: 1.0).",
    # Paths (gitignored)
    "WORK_TRACKER_DATA_DIR": "Local data directory (default: .local/work_tracker).",
    "WORK_TRACKER_SNAPSHOT_PATH": "Saved tasks JSON path (default: <data_dir>/tasks.json).",
    "WORK_TRACKER_EXPORT_DIR": "Where /export writes files (default: <data_dir>/exports).",
}
