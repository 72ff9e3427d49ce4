#!/usr/bin/env python
"""Render the dashboard from the command line for troubleshooting.

Boots a dashboard client against a running server and prints what each
visible widget would show.  With ``--watch`` the refresh scheduler keeps
running and a fresh snapshot is printed after every tick.

Usage:
    python -m scripts.dashboard_snapshot
    python -m scripts.dashboard_snapshot --url http://dashboard.local:8000
    python -m scripts.dashboard_snapshot --storage /tmp/dash.json --watch --iterations 10
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from client import Dashboard, DashboardAPI, LocalStorage
from config import settings
from logging_config import setup_logging

logger = logging.getLogger(__name__)


def print_snapshot(snapshot: dict) -> None:
    print(json.dumps(snapshot, indent=2, default=str))


def main(argv: list[str] | None = None) -> None:
    """Entry point: parse args, boot the dashboard, print snapshots."""
    parser = argparse.ArgumentParser(
        description="Boot a dashboard client and print the rendered widget data.",
    )
    parser.add_argument(
        "--url",
        default=settings.DASHBOARD_URL,
        help=f"Dashboard server origin (default: {settings.DASHBOARD_URL})",
    )
    parser.add_argument(
        "--storage",
        type=Path,
        default=None,
        help="JSON file used as persistent local storage (default: in-memory)",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running the refresh scheduler after the first snapshot",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Stop watching after this many scheduler ticks",
    )
    parser.add_argument(
        "--tick",
        type=float,
        default=5.0,
        help="Seconds between scheduler ticks (default: 5)",
    )

    args = parser.parse_args(argv)
    setup_logging()

    api = DashboardAPI(args.url)
    try:
        dashboard = Dashboard(api, local_storage=LocalStorage(args.storage))
        print_snapshot(dashboard.boot())

        if not args.watch:
            return

        count = 0
        while args.iterations is None or count < args.iterations:
            time.sleep(args.tick)
            ran = dashboard.scheduler.run_due()
            count += 1
            if ran:
                logger.info("Refreshed: %s", ", ".join(ran))
                print_snapshot(dashboard.snapshot())
    except KeyboardInterrupt:
        print("\nStopped.")
    finally:
        api.close()


if __name__ == "__main__":
    main()
