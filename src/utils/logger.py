import logging
import os

from rich.logging import RichHandler


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # Initial default width

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )

        dynamic_width = CenteredFormatter.longest_name_length + 2
        record.name = f"{record.name.center(dynamic_width - 2)}"
        return super().format(record)


def _log_level() -> int:
    explicit = os.getenv("WEBSHOP_LOG_LEVEL")
    if explicit:
        level = logging.getLevelName(explicit.strip().upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if os.getenv("DEBUG") else logging.INFO


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger rendered by RichHandler.

    If WEBSHOP_LOG_FILE is set the records go to that file instead, so they
    don't draw over the admin console.
    """
    if name is None:
        name = "webshop"
    logger = logging.getLogger(name)
    log_level = _log_level()
    logger.setLevel(log_level)

    if not logger.handlers:
        format_pattern = "[%(name)s]  %(message)s"
        formatter = CenteredFormatter(format_pattern)

        log_file = os.getenv("WEBSHOP_LOG_FILE")
        if log_file:
            handler = logging.FileHandler(log_file, encoding="utf-8")
            formatter = CenteredFormatter(
                "%(asctime)s %(levelname)-8s [%(name)s]  %(message)s"
            )
        else:
            handler = RichHandler(
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
        logger.debug(f"Logger for '{name}' initialized.")

    return logger
