"""
=============================================================
Centralized logging configuration for the staging pipeline.
=============================================================

A staging run logs one banner per load, one line per table and a closing
summary. Scheduled runs usually also keep a copy in logs/.

    setup_logging()      root logger: console (colored) + optional file
    get_logger()         module logger
    log_banner()         boxed section header used by the load manager

Warehouse driver loggers (Snowflake connector, SQLAlchemy engine) are held
at WARNING unless the run itself is at DEBUG, otherwise every statement
would be echoed twice.

Example:
    >>> from core.logger import get_logger, setup_logging
    >>>
    >>> setup_logging(log_level='DEBUG', log_file='incremental.log')
    >>> logger = get_logger(__name__)
    >>> logger.info("Building staging statements")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

NOISY_LOGGERS = ('snowflake.connector', 'sqlalchemy.engine', 'urllib3')

BANNER_WIDTH = 70
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(emoji)s ' + PLAIN_FORMAT

RESET = '\033[0m'

# level -> (ANSI color, emoji)
LEVEL_STYLES = {
    'DEBUG': ('\033[36m', '🔍'),
    'INFO': ('\033[32m', 'ℹ️ '),
    'WARNING': ('\033[33m', '⚠️ '),
    'ERROR': ('\033[31m', '❌'),
    'CRITICAL': ('\033[35m', '🔥'),
}


class ColoredFormatter(logging.Formatter):
    """Console formatter with a colored level name and an emoji prefix.

    Formats a copy of the record, so file handlers sharing it still see
    the plain level name.
    """

    def format(self, record):
        styled = logging.makeLogRecord(record.__dict__)
        color, emoji = LEVEL_STYLES.get(styled.levelname, ('', ''))
        styled.emoji = emoji
        if color:
            styled.levelname = f"{color}{styled.levelname}{RESET}"
        return super().format(styled)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Module logger, optionally with its own level (e.g. 'DEBUG')."""
    logger = logging.getLogger(name)
    if level:
        logger.setLevel(level.upper())
    return logger


def log_banner(logger: logging.Logger, title: str) -> None:
    """Log a title boxed between two rules of '=' characters."""
    logger.info("=" * BANNER_WIDTH)
    logger.info(title)
    logger.info("=" * BANNER_WIDTH)


def setup_logging(
    log_level: str = 'INFO',
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: bool = True
) -> None:
    """Configure the root logger for a staging run.

    Replaces any handlers already installed, so calling it again (for
    instance from the CLI after the import-time default) is safe.

    Args:
        log_level: DEBUG/INFO/WARNING/ERROR/CRITICAL
        log_file: File name written under log_dir, no file when omitted
        log_dir: Directory of log_file (default 'logs', created if missing)
        console_output: Write to stdout
        use_colors: Use ColoredFormatter on stdout
    """
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        if use_colors:
            console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        else:
            console_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir or 'logs')
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    driver_level = level if level == logging.DEBUG else max(level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(driver_level)


def _init_default_logging():
    """Console logging at INFO unless the root logger is already configured."""
    if not logging.getLogger().handlers:
        setup_logging()


_init_default_logging()
