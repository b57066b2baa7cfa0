import logging
import sys

from config import settings

ROOT_LOGGER = "bookstore"


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure the 'bookstore' logger once and return it.

    A stdout handler is attached only when none is present, so uvicorn or a
    test harness can install their own first.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    # our handler already prints; root/uvicorn handlers would repeat each line
    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger(ROOT_LOGGER)
    return base.getChild(name) if name else base
