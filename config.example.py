# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todo).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "TODO_CONSOLE_ENABLED": "Run the interactive console (true/false, default true).",
    # Storage (gitignored)
    "TODO_DATA_DIR": "Local data directory for prefs and logs (default: .local/todo).",
    "TODO_PREFS_DB_PATH": "Preference store SQLite path (default: <data_dir>/prefs.sqlite3).",
    "TODO_STORAGE_KEY": "Preference key holding the task list blob (default: Tasks).",
    # Reminders
    "TODO_REMINDERS_ENABLED": "Schedule due-date reminders (true/false, default true).",
    "TODO_REMINDER_TIME": "Time of day (HH:MM) reminders fire on the due date (default: 00:00).",
    "TODO_REMINDER_POLL_SECONDS": "How often the reminder loop checks for due reminders (default: 15).",
}
