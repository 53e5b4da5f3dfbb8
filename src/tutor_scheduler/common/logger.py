'''
Application-wide logger. Import `log` from here instead of calling
logging.getLogger in each module.
'''
import logging
import sys

from .config import settings

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def setup_logger(name: str = 'tutor-scheduler', level: str | None = None) -> logging.Logger:
    """
    Configures the application logger with a single stdout handler.
    The level comes from settings.LOG_LEVEL unless given explicitly.
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or settings.LOG_LEVEL).upper())
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(module)-22s - %(levelname)s - %(message)s'
        ))
        logger.addHandler(handler)

    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger

log = setup_logger()
