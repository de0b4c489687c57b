"""Logging helpers for psdtorch.

Every module of the package logs through a child of the ``psdtorch``
logger. Nothing is printed unless the application configures a handler,
either on its own or through :func:`configure_logging`.

Examples::

    >>> from psdtorch.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG")
    >>> get_logger(__name__).debug("Resizing the factor")
"""

import logging
import sys
from contextlib import contextmanager


LOGGER_NAME = "psdtorch"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _to_level(level):
    if isinstance(level, str):
        return getattr(logging, level.upper())
    return level


def get_logger(name=None):
    r"""
    Returns a logger under the ``psdtorch`` namespace

    Args:
        name (str): Optional. Name of the logger. Names outside of the
            ``psdtorch`` namespace are prefixed with it. Default: ``None``,
            which returns the package logger
    """
    if name is None:
        return logging.getLogger(LOGGER_NAME)
    if not name.startswith(LOGGER_NAME):
        name = "{}.{}".format(LOGGER_NAME, name)
    return logging.getLogger(name)


def set_log_level(level):
    logging.getLogger(LOGGER_NAME).setLevel(_to_level(level))


def configure_logging(level="INFO", format_string=None):
    r"""
    Sends the records of the package to ``stderr``

    Args:
        level (str or int): Optional. Logging level. Default: ``"INFO"``
        format_string (str): Optional. Format of the records.
            Default: :data:`DEFAULT_FORMAT`
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    level = _to_level(level)
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False


def disable_logging():
    logging.getLogger(LOGGER_NAME).setLevel(logging.CRITICAL + 1)


@contextmanager
def log_level(level):
    r"""
    Temporarily changes the level of the package logger

    Args:
        level (str or int): Logging level used inside the ``with`` block
    """
    logger = logging.getLogger(LOGGER_NAME)
    old_level = logger.level
    logger.setLevel(_to_level(level))
    try:
        yield
    finally:
        logger.setLevel(old_level)


_logger = get_logger()
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())
