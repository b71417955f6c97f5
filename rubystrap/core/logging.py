"""
rubystrap Logging
Diagnostics go to stderr through rich so they never interleave with the
installer screens printed on stdout.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
``setup_logging`` once per command with the level from ``--log-level`` or
the config file.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LEVELS = {
    'error': logging.ERROR,
    'warning': logging.WARNING,
    'info': logging.INFO,
    'debug': logging.DEBUG,
}

# Marks the handler this module installed, so repeated calls reuse it
HANDLER_NAME = 'rubystrap'


def _find_handler(logger: logging.Logger):
    for handler in logger.handlers:
        if handler.get_name() == HANDLER_NAME:
            return handler
    return None


def setup_logging(level: str = "warning") -> logging.Handler:
    """
    Route log records to a stderr RichHandler at ``level``.

    Unknown level names fall back to warning. Tracebacks are only rendered
    in debug mode.

    Returns:
        The rubystrap handler on the root logger
    """
    log_level = LEVELS.get((level or '').lower(), logging.WARNING)

    root = logging.getLogger()
    root.setLevel(log_level)

    handler = _find_handler(root)
    if handler is None:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            show_time=False,
            markup=False,
            rich_tracebacks=(log_level == logging.DEBUG),
        )
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(handler)
    handler.setLevel(log_level)
    return handler
