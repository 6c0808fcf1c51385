import atexit
import logging
import os

from rich.console import Console
from rich.logging import RichHandler


class CenteredFormatter(logging.Formatter):
    """Pads logger names so messages from different modules line up."""

    name_width = 14

    def format(self, record):
        CenteredFormatter.name_width = max(
            CenteredFormatter.name_width, len(record.name)
        )
        record.name = record.name.center(CenteredFormatter.name_width)
        return super().format(record)


_console = None
_log_file = None
_handlers = []


def _log_console() -> Console:
    # stdout is owned by the TUI, so records go to a file or stderr
    global _console, _log_file
    if _console is None:
        log_path = os.getenv("STOREFRONT_LOG_FILE")
        if log_path:
            _log_file = open(log_path, "a", encoding="utf-8")
            _console = Console(file=_log_file)
        else:
            _console = Console(stderr=True)
    return _console


def close_log_console() -> None:
    """
    Detach every handler created by get_logger and close the log file, if any.
    Loggers asked for afterwards get a fresh console.
    """
    global _console, _log_file
    for logger, handler in _handlers:
        logger.removeHandler(handler)
        handler.close()
    _handlers.clear()
    if _log_file is not None:
        _log_file.close()
        _log_file = None
    _console = None


atexit.register(close_log_console)


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.
    """
    if name is None:
        name = "storefront"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if os.getenv("DEBUG") else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        handler = RichHandler(
            console=_log_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
        handler.setLevel(log_level)
        logger.addHandler(handler)
        _handlers.append((logger, handler))

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized.")

    return logger
