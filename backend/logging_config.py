"""Logging setup for the dashboard server and client scripts."""

import logging

from config import settings

# Third-party loggers that drown out the dashboard's own output
QUIET_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "httpx",
    "httpcore",
    "urllib3",
)


def setup_logging() -> None:
    """Configure the root logger from settings.

    Logs go to stderr, and additionally to ``settings.LOG_FILE`` when set
    (the kiosk display runs headless). Upstream HTTP chatter is held at
    WARNING; the per-request access log is only kept in DEBUG.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE, encoding="utf-8"))

    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
        datefmt="%H:%M:%S",
        level=getattr(logging, settings.LOG_LEVEL),
        handlers=handlers,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    access_level = logging.INFO if settings.DEBUG else logging.WARNING
    logging.getLogger("uvicorn.access").setLevel(access_level)
