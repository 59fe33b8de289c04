# src/todo_tracker/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from collections.abc import Callable

from ..cli.commands import registry as command_registry
from ..cli.render import render_tasks
from ..core.errors import AllocationFailure
from ..core.state import AppState

logger = logging.getLogger(__name__)

QUIT_KEY = "q"


def _clear_screen() -> None:
    if sys.stdout.isatty():
        print("\033[H\033[2J", end="", flush=True)


def render_screen(state: AppState, out: Callable[[str], None] = print) -> None:
    color = bool(getattr(state.settings, "color_enabled", True)) and sys.stdout.isatty()
    for line in render_tasks(state.store.current_tasks(), state.selected, color=color):
        out(line)
    out("")
    out(state.status_line or "Press 'h' for help.")


def run_console_loop(
    state: AppState,
    *,
    ask: Callable[[str], str] = input,
    out: Callable[[str], None] = print,
) -> None:
    """
    Blocking key loop: one command character per line ('q' quits).

    Input is always read without holding the store lock; each store call
    takes it for just that operation.
    """
    logger.info("Console connector started (tasks=%d).", len(state.store))

    while True:
        if out is print:
            _clear_screen()
        state.drain_background()
        render_screen(state, out)

        try:
            line = ask("> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            out("")
            break

        if not line:
            continue

        key = line[0]
        if key == QUIT_KEY:
            logger.info("Console quit command received.")
            break

        state.status_line = ""
        try:
            command_registry.handle(state, key, ask, emit=out)
        except (EOFError, KeyboardInterrupt):
            logger.info("Input closed during command, exiting.")
            break
        except AllocationFailure:
            raise
        except Exception:
            logger.exception("Command handler crashed.")
            state.notify("Internal error while handling a command.", level=logging.ERROR)

    logger.info("Console connector finished.")
