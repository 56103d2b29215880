from __future__ import annotations

import json
import logging
import pathlib
import sys
from typing import Optional, Union

_COLORS = {
    "grey": "\033[90m",
    "cyan": "\033[96m",
    "blue": "\033[94m",
    "yellow": "\033[93m",
    "red": "\033[91m",
    "bright_purple": "\033[38;5;165m",
    "bold": "\033[1m",
    "reset": "\033[0m",
}

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _short_name(name: str) -> str:
    """Shorten a logger name for console output.

    ``radical.flowcontext.stores.memory`` becomes ``store(memory)``, other
    loggers keep their last dotted component.
    """
    if not name:
        return "unknown"
    if name == "__main__":
        return "main"
    if ".stores." in name:
        return f"store({name.split('.')[-1]})"
    return name.split(".")[-1]


class _ColoredFormatter(logging.Formatter):
    """Console formatter with per-level colors and short logger names."""

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__(datefmt=_DATE_FORMAT)
        colors = _COLORS if use_colors else {k: "" for k in _COLORS}

        level_colors = {
            logging.DEBUG: colors["cyan"],
            logging.INFO: colors["blue"],
            logging.WARNING: colors["yellow"],
            logging.ERROR: colors["red"],
            logging.CRITICAL: colors["red"] + colors["bold"],
        }

        separator = " │ "
        self.level_formatters = {
            level: logging.Formatter(
                f"{colors['grey']}%(asctime)s.%(msecs)03d{colors['reset']}"
                f"{separator}{color}%(levelname)s{colors['reset']}"
                f"{separator}{colors['bright_purple']}[%(short_name)s]"
                f"{colors['reset']}{separator}%(message)s",
                datefmt=_DATE_FORMAT,
            )
            for level, color in level_colors.items()
        }

    def format(self, record: logging.LogRecord) -> str:
        record.short_name = _short_name(record.name)
        formatter = self.level_formatters.get(
            record.levelno, self.level_formatters[logging.INFO]
        )
        return formatter.format(record)


class _StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def init_default_logger(
    log_level: Union[int, str] = logging.INFO,
    *,
    output_file: Optional[Union[str, pathlib.Path]] = None,
    use_colors: bool = True,
    clear_handlers: bool = False,
    logger_name: Optional[str] = None,
    structured_file: Optional[Union[str, pathlib.Path]] = None,
) -> logging.Logger:
    """Configure console logging, and optionally plain and JSON file logging.

    Args:
        log_level: Level for every handler added here.
        output_file: Path of a plain-text log file.
        use_colors: Enable colored console output.
        clear_handlers: Remove existing handlers from the logger first.
        logger_name: Name for the logger. If None, configures the root logger.
        structured_file: Path of a JSON-lines log file.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(logger_name) if logger_name else logging.getLogger()

    if clear_handlers:
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_ColoredFormatter(use_colors=use_colors))
    console_handler.setLevel(log_level)
    logger.addHandler(console_handler)

    if output_file is not None:
        file_path = pathlib.Path(output_file)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(file_path)
        file_handler.setFormatter(_ColoredFormatter(use_colors=False))
        file_handler.setLevel(log_level)
        logger.addHandler(file_handler)

    if structured_file is not None:
        struct_path = pathlib.Path(structured_file)
        struct_path.parent.mkdir(parents=True, exist_ok=True)
        struct_handler = logging.FileHandler(struct_path)
        struct_handler.setFormatter(_StructuredFormatter())
        struct_handler.setLevel(log_level)
        logger.addHandler(struct_handler)

    logger.setLevel(logging.NOTSET)

    logger.debug(
        "Logger configured - File: %s, Structured: %s",
        output_file or "disabled",
        structured_file or "disabled",
    )
    return logger


def get_logger(
    name: str = None, level: Union[int, str] = logging.INFO
) -> logging.Logger:
    """Quick logger setup for simple use cases."""
    if not logging.getLogger().handlers:
        init_default_logger(level)
    return logging.getLogger(name)
