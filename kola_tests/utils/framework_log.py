import functools
import logging
import pathlib as pl
import threading
import time

from kola_tests.utils import temptools

_LOGGER_LOCK = threading.Lock()


@functools.cache
def get_framework_log_path() -> pl.Path:
    return temptools.get_basetemp() / "framework.log"


class UTCFormatter(logging.Formatter):
    converter = time.gmtime  # type: ignore[assignment]


def framework_logger() -> logging.Logger:
    """Get logger for the `framework.log` file.

    It can be used for logging (and later reporting) events like a test that couldn't be
    dispatched because the cluster didn't have enough machines.

    Dispatches running in parallel threads share the logger, the file handler is attached only once.
    """
    logger = logging.getLogger("framework")
    with _LOGGER_LOCK:
        if not logger.handlers:
            handler = logging.FileHandler(get_framework_log_path())
            handler.setFormatter(UTCFormatter("%(asctime)s %(levelname)s %(message)s"))
            logger.setLevel(logging.INFO)
            logger.addHandler(handler)

    return logger
