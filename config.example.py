# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
See .env.example for a ready-to-copy template.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todo).",
    "TODO_LOG_LEVEL": "Console logging level (default: WARNING). The log file always gets DEBUG.",
    # Paths
    "TODO_DATA_DIR": "Local data directory (default: ~/.local/share/todo).",
    "TODO_TASKS_PATH": "Tasks file path (default: <data_dir>/tasks.txt).",
    "TODO_LOG_PATH": "Log file path (default: <data_dir>/todo_app.log).",
    # Behaviour
    "TODO_AUTOSAVE_EVERY": "Save in the background after this many changes (default: 5).",
    "TODO_UNDO_CAPACITY": "Max number of undoable actions kept (default: 100).",
    "TODO_COLOR": "Colorize the task table on a terminal (true/false, default: true).",
}
