# hotel_ledger/logging_config.py
import logging
import sys

from .config import settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s.%(module)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def build_handler(level: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


logger = logging.getLogger("hotel_ledger")
logger.setLevel(settings.LOG_LEVEL.upper())
# Records go only to the handler below
logger.propagate = False

logger.handlers.clear()
logger.addHandler(build_handler(settings.LOG_LEVEL.upper()))
