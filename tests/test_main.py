"""
===============================================
Comprehensive pytest suite for main.py
===============================================

Sections:
---------
1. CLI tests - Argument parsing
2. System tests - Dry runs against a local configuration file, connection check
3. Edge case tests - Exit codes

How to Execute:
---------------
All tests:          pytest tests/test_main.py -v
By category:        pytest tests/test_main.py -m unit
"""

from unittest.mock import patch

import pytest

from core.config import config
from main import build_parser, main
from models.staging_models import TableConfig, TableResult, TableStatus


# =============================================================================
# SECTION 1: CLI TESTS
# =============================================================================

@pytest.mark.unit
def test_parser_requires_a_mode():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


@pytest.mark.unit
def test_parser_rejects_both_modes():
    with pytest.raises(SystemExit):
        build_parser().parse_args(['--full', '--incremental'])


@pytest.mark.unit
def test_parser_rejects_check_connection_with_a_load_mode():
    with pytest.raises(SystemExit):
        build_parser().parse_args(['--check-connection', '--full'])


@pytest.mark.unit
def test_parser_flags():
    args = build_parser().parse_args(['--incremental', '--continue-on-error', '--log-level', 'DEBUG'])

    assert args.incremental is True
    assert args.full is False
    assert args.continue_on_error is True
    assert args.log_level == 'DEBUG'
    assert args.config_file is None


@pytest.mark.edge_case
def test_dry_run_requires_config_file():
    with pytest.raises(SystemExit) as exc_info:
        main(['--full', '--dry-run'])

    assert exc_info.value.code == 2


# =============================================================================
# SECTION 2: SYSTEM TESTS
# =============================================================================

@pytest.mark.system
def test_full_dry_run_prints_statements(config_file, capsys):
    exit_code = main(['--full', '--dry-run', '--config-file', str(config_file)])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert '-- RAOHDR (FULL)' in out
    assert '-- RAODET (FULL)' in out
    assert '-- CUSTMAST' not in out
    assert 'CREATE OR REPLACE TABLE' in out
    assert '✅ All staging tables processed and renamed successfully. (1 skipped: CUSTMAST)' in out


@pytest.mark.system
def test_incremental_dry_run_prints_merges(config_file, capsys):
    exit_code = main(['--incremental', '--dry-run', '--config-file', str(config_file)])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert '-- RAOHDR (INCREMENTAL)' in out
    assert 'MERGE INTO' in out


@pytest.mark.system
def test_check_connection_reports_reachable_warehouse(monkeypatch, capsys):
    monkeypatch.setattr(config.warehouse, 'url', 'sqlite://')

    exit_code = main(['--check-connection'])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert 'Warehouse: sqlite://' in out
    assert '✅ Connected to sqlite://' in out

# =============================================================================
# SECTION 3: EDGE CASE TESTS - exit codes
# =============================================================================

@pytest.mark.edge_case
def test_config_error_exits_with_one(tmp_path, capsys):
    exit_code = main(['--full', '--dry-run', '--config-file', str(tmp_path / 'absent.json')])

    assert exit_code == 1
    assert 'Error loading config:' in capsys.readouterr().out


@pytest.mark.edge_case
def test_unreachable_warehouse_exits_with_one(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(config.warehouse, 'url', f"sqlite:///{tmp_path}/missing/warehouse.db")

    exit_code = main(['--check-connection'])

    assert exit_code == 1
    assert '❌ Connection failed:' in capsys.readouterr().out


@pytest.mark.edge_case
def test_keyboard_interrupt_exits_with_130(config_file):
    with patch('main.StagingManager.run', side_effect=KeyboardInterrupt):
        exit_code = main(['--full', '--dry-run', '--config-file', str(config_file)])

    assert exit_code == 130


@pytest.mark.edge_case
def test_failed_table_exits_with_one(config_file, capsys):
    """A FAILED table result overrides an otherwise successful status."""
    def run_with_failure(manager, mode, path=None):
        manager.last_results = [
            TableResult(TableConfig('RAOHDR', 'RENTAL_HEADER'), mode, status=TableStatus.FAILED)
        ]
        return '✅ All staging tables processed and renamed successfully.'

    with patch('main.StagingManager.run', autospec=True, side_effect=run_with_failure):
        exit_code = main(['--full', '--dry-run', '--config-file', str(config_file)])

    assert exit_code == 1
