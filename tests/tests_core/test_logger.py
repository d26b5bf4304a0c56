"""
==================================================
Comprehensive pytest suite for core/logger.py
==================================================

How to Execute:
---------------
All tests:          pytest tests/tests_core/test_logger.py -v
"""

import logging

import pytest

from core.logger import (
    NOISY_LOGGERS,
    ColoredFormatter,
    get_logger,
    log_banner,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    """Put back pytest's handlers after setup_logging() replaced them."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
def test_colored_formatter_leaves_record_untouched():
    record = logging.makeLogRecord({'levelname': 'WARNING', 'msg': 'table skipped', 'name': 'staging'})
    formatter = ColoredFormatter('%(emoji)s %(levelname)s %(message)s')

    output = formatter.format(record)

    assert '⚠️' in output
    assert '\033[33mWARNING\033[0m' in output
    assert record.levelname == 'WARNING'
    assert not hasattr(record, 'emoji')


@pytest.mark.unit
def test_get_logger_level_override():
    logger = get_logger('tests.core.logger', level='debug')

    assert logger.level == logging.DEBUG


@pytest.mark.integration
def test_setup_logging_writes_plain_file(tmp_path, restore_root_logger):
    setup_logging(log_level='INFO', log_file='run.log', log_dir=str(tmp_path / 'logs'), console_output=False)

    log_banner(logging.getLogger('staging.loader'), 'STAGING FULL LOAD')
    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = (tmp_path / 'logs' / 'run.log').read_text(encoding='utf-8').splitlines()
    assert len(lines) == 3
    assert lines[0].endswith('=' * 70)
    assert lines[1].endswith('staging.loader - INFO - STAGING FULL LOAD')
    assert '\033[' not in lines[1]


@pytest.mark.unit
def test_driver_loggers_quiet_unless_debug(restore_root_logger):
    setup_logging(log_level='INFO', console_output=False)
    assert all(logging.getLogger(name).level == logging.WARNING for name in NOISY_LOGGERS)

    setup_logging(log_level='DEBUG', console_output=False)
    assert all(logging.getLogger(name).level == logging.DEBUG for name in NOISY_LOGGERS)
