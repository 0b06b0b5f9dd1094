"""
Custom logging configuration for certvault.

This module provides the bullet-point formatter and initialization function
used for all console output of the tool.
"""

import logging as _logging
import sys
from typing import Dict

_IS_VERBOSE = False  # Flag to control verbosity of logging output

# Logger instance for direct import
logging = _logging.getLogger("certvault")


def is_verbose() -> bool:
    """Check if verbose logging is enabled."""
    return _IS_VERBOSE


# Bullet point mapping for different log levels
BULLET_POINTS: Dict[int, str] = {
    _logging.INFO: "[*]",
    _logging.DEBUG: "[+]",
    _logging.WARNING: "[!]",
    _logging.ERROR: "[-]",
    _logging.CRITICAL: "[-]",
}


class Formatter(_logging.Formatter):
    """
    Formatter that prefixes each message with a bullet for its level.

    - INFO:    [*]
    - DEBUG:   [+]
    - WARNING: [!]
    - ERROR:   [-]
    - CRITICAL:[-]
    """

    def __init__(self) -> None:
        super().__init__("%(bullet)s %(message)s")

    def format(self, record: _logging.LogRecord) -> str:
        record.bullet = BULLET_POINTS.get(record.levelno, "[-]")
        return super().format(record)


def init(verbose: bool = False) -> None:
    """
    Attach a stdout handler with the bullet-point formatter to the certvault
    logger. Verbose mode logs at DEBUG level and makes handle_error print
    stacktraces.
    """
    global _IS_VERBOSE
    _IS_VERBOSE = verbose  # type: ignore

    handler = _logging.StreamHandler(sys.stdout)
    handler.setFormatter(Formatter())

    # Replace handlers of an earlier initialization
    logging.handlers.clear()
    logging.addHandler(handler)
    logging.setLevel(_logging.DEBUG if verbose else _logging.INFO)
    logging.propagate = False
