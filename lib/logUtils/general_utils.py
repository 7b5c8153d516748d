"""Logging helpers shared by the matching core and the group model."""

from __future__ import annotations

import logging
import traceback

from ... import config

_logger = logging.getLogger(config.PACKAGE_NAME)
_logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))
_logger.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the package logger so host applications can attach handlers."""
    return _logger


def log(message: str, level: int = logging.INFO, force_console: bool = False) -> None:
    """Utility function to easily handle logging in your app.

    Arguments:
    message -- The message to log.
    level -- The logging severity level.
    force_console -- Forces the message to be written to the console
        even if DEBUG is off.
    """
    # Always print to console, only seen through IDE.
    if config.DEBUG or force_console:
        print(message)

    _logger.log(level, message)


def handle_error(name: str, show_traceback: bool = True) -> None:
    """Log the exception currently being handled.

    Call only from within an ``except`` block.

    Arguments:
    name -- The name of the function or operation that failed.
    show_traceback -- Include the formatted traceback in the record.
    """
    log('===== Error =====', logging.ERROR)
    if show_traceback:
        log(f'{name}\n{traceback.format_exc()}', logging.ERROR)
    else:
        log(name, logging.ERROR)
