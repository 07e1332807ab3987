# src/work_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (loading the saved snapshot), starts the
1 Hz ticker in a background thread, then runs the console REPL.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.task_scheduler import TickerBackgroundRunner, start_ticker_in_background

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    ticker: TickerBackgroundRunner | None = None
    if settings.ticker_enabled:
        ticker = start_ticker_in_background(
            state.task_store,
            interval_seconds=settings.tick_interval_seconds,
        )

    try:
        run_console_loop(state)
    finally:
        if ticker is not None:
            ticker.stop()
            ticker.join(timeout=5.0)

        shutdown_state(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
