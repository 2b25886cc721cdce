import logging

from rich.console import Console
from rich.logging import RichHandler

from utils import config


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # Initial default width

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )

        width = CenteredFormatter.longest_name_length
        record.name = record.name.center(width)
        return super().format(record)


_console: Console | None = None


def _level() -> int:
    if config.DEBUG:
        return logging.DEBUG
    return logging.getLevelNamesMapping().get(config.LOG_LEVEL, logging.INFO)


def _get_console() -> Console:
    global _console
    if _console is None:
        # the TUI owns the terminal, so it sends logs to LOG_FILE instead
        if config.LOG_FILE:
            _console = Console(
                file=open(config.LOG_FILE, "a", encoding="utf-8"), width=140
            )
        else:
            _console = Console(stderr=True)
    return _console


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.

    Level is DEBUG when the DEBUG env var is set, otherwise LOG_LEVEL.
    """
    if name is None:
        name = "shop"
    logger = logging.getLogger(name)
    log_level = _level()
    logger.setLevel(log_level)

    if not logger.handlers:
        formatter = CenteredFormatter("[%(name)s]  %(message)s")

        handler = RichHandler(
            console=_get_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized with RichHandler.")

    return logger
