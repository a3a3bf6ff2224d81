"""
Logging Configuration for the Conversion Library.

Every module obtains its logger through `get_logger(__name__)` so that all
records share one format. The numerical code logs at DEBUG level (datum
shifts, derived projection constants, zone detection) and at WARNING level
for solver diagnostics such as a geocentric iteration that reached its cap.
"""

import logging
import sys
from typing import Iterable, Optional


LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Top-level packages whose loggers `set_level` adjusts
PACKAGE_LOGGERS = ("common", "geospatial")


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the conversion library.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def set_level(level: int, names: Optional[Iterable[str]] = None) -> None:
    """Set the level of every library logger created so far.

    Parameters
    ----------
    level : int
        New logging level, e.g. ``logging.DEBUG``.
    names : iterable of str, optional
        Logger name prefixes to adjust (default: the library packages).
    """
    prefixes = tuple(names) if names is not None else PACKAGE_LOGGERS
    for name in list(logging.root.manager.loggerDict):
        if name.split(".")[0] in prefixes:
            logging.getLogger(name).setLevel(level)
