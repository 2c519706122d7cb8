"""
Logging setup for rolodex.

Everything logs under the ``rolodex`` logger. The CLI configures it once:
- a stderr handler, colored when the terminal allows it
- an optional daily file ``rolodex_YYYYMMDD.log`` that always records DEBUG
- levels taken from ROLODEX_LOG_LEVEL / ROLODEX_DEBUG unless given explicitly

Old daily files are pruned with cleanup_old_logs().
"""

import copy
import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from rolodex.utils.paths import DEFAULT_CONFIG_DIR

ROOT_LOGGER_NAME = "rolodex"

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ENV_LOG_LEVEL = "ROLODEX_LOG_LEVEL"
ENV_DEBUG = "ROLODEX_DEBUG"
ENV_LOG_FILE = "ROLODEX_LOG_FILE"

DEFAULT_LOG_DIR = DEFAULT_CONFIG_DIR / "logs"
LOG_FILE_PREFIX = "rolodex_"

# Values of ROLODEX_LOG_FILE that turn file logging off
_LOG_FILE_OFF = {"", "none", "disabled"}

LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
RESET = "\033[0m"


def terminal_supports_color() -> bool:
    """True when stderr is a tty, NO_COLOR is unset and TERM is not dumb."""
    isatty = getattr(sys.stderr, "isatty", None)
    if isatty is None or not isatty():
        return False
    if os.environ.get("NO_COLOR"):
        return False
    return os.environ.get("TERM", "") != "dumb"


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level name and message in ANSI colors."""

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        use_colors: bool = True,
    ):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and terminal_supports_color()

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno)
        if not (self.use_colors and color):
            return super().format(record)

        # Handlers share the record; color a copy only
        tinted = copy.copy(record)
        tinted.levelname = f"{color}{record.levelname}{RESET}"
        tinted.msg = f"{color}{record.getMessage()}{RESET}"
        tinted.args = None
        return super().format(tinted)


def get_log_level_from_env() -> int:
    """
    Resolve the console level from the environment.

    ROLODEX_DEBUG (1/true/yes) wins; otherwise ROLODEX_LOG_LEVEL is looked up
    case-insensitively, falling back to WARNING for missing or unknown names.
    """
    if os.environ.get(ENV_DEBUG, "").lower() in ("1", "true", "yes"):
        return logging.DEBUG
    name = os.environ.get(ENV_LOG_LEVEL, "WARNING").upper()
    return LEVEL_NAMES.get(name, logging.WARNING)


def get_log_file_path(log_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Where the file handler should write, or None when file logging is off.

    ROLODEX_LOG_FILE overrides the daily file inside ``log_dir``.
    """
    override = os.environ.get(ENV_LOG_FILE)
    if override is not None:
        return None if override.lower() in _LOG_FILE_OFF else Path(override)

    stamp = date.today().strftime("%Y%m%d")
    return (log_dir or DEFAULT_LOG_DIR) / f"{LOG_FILE_PREFIX}{stamp}.log"


def _console_handler(level: int, verbose: bool, use_colors: bool) -> logging.Handler:
    fmt = VERBOSE_FORMAT if verbose else CONSOLE_FORMAT
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if use_colors:
        handler.setFormatter(ColoredFormatter(fmt, DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(fmt, DATE_FORMAT))
    return handler


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(VERBOSE_FORMAT, DATE_FORMAT))
    return handler


def setup_logging(
    level: Optional[int] = None,
    verbose: bool = False,
    log_dir: Optional[Path] = None,
    log_file: Optional[Path] = None,
    enable_file_logging: bool = False,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Configure the ``rolodex`` logger, replacing any earlier handlers.

    Args:
        level: Console level; read from the environment when None
        verbose: Force DEBUG and include timestamps and source locations
        log_dir: Directory for the daily log file
        log_file: Explicit log file, takes precedence over log_dir
        enable_file_logging: Also write to a log file
        use_colors: Color console output when the terminal supports it

    Returns:
        The configured ``rolodex`` logger
    """
    if verbose:
        level = logging.DEBUG
    elif level is None:
        level = get_log_level_from_env()

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(level)
    logger.addHandler(_console_handler(level, verbose, use_colors))

    if not enable_file_logging:
        return logger

    path = log_file or get_log_file_path(log_dir)
    if path is None:
        return logger

    try:
        logger.addHandler(_file_handler(path))
    except OSError as e:
        logger.warning(f"Could not open log file {path}: {e}")
        return logger

    # The logger itself must pass DEBUG through to the file handler
    logger.setLevel(logging.DEBUG)
    logger.debug(f"Logging to {path}")
    return logger


def cleanup_old_logs(log_dir: Optional[Path] = None, keep_count: int = 10) -> int:
    """
    Delete all but the ``keep_count`` newest daily log files.

    A keep_count of 0 or less keeps everything. Files that cannot be removed
    are left in place. Returns how many files were deleted.
    """
    directory = log_dir or DEFAULT_LOG_DIR
    if keep_count <= 0 or not directory.is_dir():
        return 0

    newest_first = sorted(
        directory.glob(f"{LOG_FILE_PREFIX}*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    removed = 0
    for stale in newest_first[keep_count:]:
        try:
            stale.unlink()
        except OSError as e:
            logging.getLogger(__name__).debug(f"Could not remove {stale}: {e}")
            continue
        removed += 1
    return removed


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, placed under the rolodex hierarchy."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "ColoredFormatter",
    "CONSOLE_FORMAT",
    "DATE_FORMAT",
    "DEFAULT_LOG_DIR",
    "VERBOSE_FORMAT",
    "cleanup_old_logs",
    "get_log_file_path",
    "get_log_level_from_env",
    "get_logger",
    "setup_logging",
    "terminal_supports_color",
]
