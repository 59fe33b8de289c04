# src/todo_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, runs the console loop in the main
thread, then saves and drains the background writer on the way out.
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.errors import AllocationFailure, StorageUnavailable
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Final save; waits for every queued write to finish."""
    try:
        state.trigger_save()
        state.persistence.shutdown()
    except Exception:
        logger.exception("Failed to save tasks on exit.")

    if state.persistence.last_error:
        print(state.persistence.last_error, file=sys.stderr)


def _emergency_save(state: AppState) -> None:
    try:
        state.persistence.save(state.store.snapshot())
    except StorageUnavailable as e:
        logger.error("Emergency save failed: %s", e.message)
    except Exception:
        logger.exception("Emergency save crashed.")


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)

    try:
        setup_logging(log_path=settings.log_path, console_level=console_level)
    except OSError as e:
        # No log file: keep going with stderr only.
        logging.basicConfig(level=console_level)
        logger.warning("Could not open log file %s: %s", settings.log_path, e)

    logger.info("Starting %s...", getattr(settings, "app_name", "todo"))

    state = create_initial_state(settings=settings)

    try:
        run_console_loop(state)
    except AllocationFailure as e:
        logger.critical("%s Exiting.", e.message)
        _emergency_save(state)
        print(e.message, file=sys.stderr)
        sys.exit(1)

    _shutdown(state)
    logger.info("Bye.")


if __name__ == "__main__":
    main()
