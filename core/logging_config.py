import logging
import os
from datetime import datetime

from core.kst_time import KST

LOG_FORMAT = "[%(levelname)s] %(asctime)s | %(name)s | %(message)s"

# Third-party loggers that flood INFO with per-request lines
QUIET_LOGGERS = ("aiohttp.access", "aiohttp.client", "asyncio")

class KSTFormatter(logging.Formatter):
    """Timestamps on the Korean civil clock, logger names shortened to the module."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return datetime.fromtimestamp(record.created, tz=KST).strftime(datefmt or "%Y-%m-%d %H:%M:%S KST")

    def format(self, record: logging.LogRecord) -> str:
        record.name = record.name.rsplit(".", 1)[-1]
        return super().format(record)

def setup_logging(level: int | None = None) -> None:
    if level is None:
        level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(KSTFormatter(fmt=LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
