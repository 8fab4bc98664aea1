"""Debug logging for toolbocks.

Truncated copies, absorbed accessor failures and similar degradations
are logged at DEBUG on the "toolbocks" logger. Nothing is printed until
enable_debug() is called or the application configures the logger.
"""

import logging

logger = logging.getLogger("toolbocks")
logger.addHandler(logging.NullHandler())

_FORMAT = "[toolbocks] %(levelname)s: %(message)s"

_debug_handler: logging.Handler | None = None


def enable_debug() -> None:
    """Enable debug logging for toolbocks (stderr)."""
    global _debug_handler
    logger.setLevel(logging.DEBUG)
    if _debug_handler is None:
        _debug_handler = logging.StreamHandler()
        _debug_handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(_debug_handler)


def disable_debug() -> None:
    """Undo enable_debug()."""
    global _debug_handler
    logger.setLevel(logging.NOTSET)
    if _debug_handler is not None:
        logger.removeHandler(_debug_handler)
        _debug_handler = None
