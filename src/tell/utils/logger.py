import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from platformdirs import user_log_dir

# Third-party loggers capped so they don't flood the log file
NOISY_DEFAULTS = {
    "asyncio": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "markdown_it": logging.WARNING,
}


class OneLineExceptionFormatter(logging.Formatter):
    """Format exceptions on a single line for cleaner logs."""

    def formatException(self, exc_info):
        result = super().formatException(exc_info)
        return repr(result)

    def format(self, record):
        result = super().format(record)
        if record.exc_text:
            result = result.replace("\n", " | ")
        return result


def default_log_file() -> str:
    return os.path.join(user_log_dir("tell"), "tell.log")


def resolve_level(name, default=logging.INFO) -> int:
    """Map a level name such as "debug" to its logging constant."""
    if not name:
        return default
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else default


def init_logger(
    log_level=logging.INFO,
    log_file=None,
    file_size=2 * 1024 * 1024,
    file_count=2,
    shell_output=False,
    log_file_mode="a",
    log_format="%(asctime)s %(levelname)s %(name)s %(funcName)s(%(lineno)d) %(message)s",
):
    """
    Initialize the root logger with a rotating file handler.

    stdout carries generated text, so shell output (when enabled) goes to
    stderr.

    Args:
        log_level: Logging level (default: INFO)
        log_file: Path to log file (default: tell.log in the user log dir)
        file_size: Max size per log file in bytes
        file_count: Number of backup files to keep
        shell_output: Whether to also output to stderr
        log_file_mode: File mode ('a' for append, 'w' for overwrite)
        log_format: Log message format string

    Returns:
        Configured root logger
    """
    log_file = log_file or default_log_file()
    main_logger = logging.getLogger()
    main_logger.setLevel(log_level)
    log_formatter = OneLineExceptionFormatter(log_format)

    # Clear existing handlers to prevent duplicates
    main_logger.handlers = []

    try:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        log_rotate_handler = RotatingFileHandler(
            log_file,
            mode=log_file_mode,
            maxBytes=file_size,
            backupCount=file_count,
            encoding="utf-8",
            delay=True,
        )
        log_rotate_handler.setFormatter(log_formatter)
        log_rotate_handler.setLevel(log_level)
        main_logger.addHandler(log_rotate_handler)
    except OSError as e:
        print(f"Exception when creating file handler: {e}", file=sys.stderr)

    if shell_output:
        stream_log_handler = logging.StreamHandler(stream=sys.stderr)
        stream_log_handler.setFormatter(log_formatter)
        stream_log_handler.setLevel(log_level)
        main_logger.addHandler(stream_log_handler)

    if not main_logger.handlers:
        main_logger.addHandler(logging.NullHandler())

    for logger_name, level in NOISY_DEFAULTS.items():
        logging.getLogger(logger_name).setLevel(level)

    return main_logger
