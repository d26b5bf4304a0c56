"""
Shared pytest configuration and fixtures for all tests.

Key fixtures:
- warehouse: WarehouseConfig with short, predictable object names
- settings: StagingSettings with the default markers and type map
- sample_config: Raw configuration document with three tables
- config_file: sample_config written to a temporary JSON file
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to sys.path to enable importing project modules
# This allows tests to import from 'core', 'sql', 'staging', etc. without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from core.config import StagingSettings, WarehouseConfig  # noqa: E402


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interactions")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")
    config.addinivalue_line("markers", "regression: Regression tests - previously fixed bugs")
    config.addinivalue_line("markers", "system: System tests - full system behavior tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests - complete workflow tests")


@pytest.fixture
def warehouse():
    """WarehouseConfig pointing at RENTALDB.SRC / RENTALDB.STAGING."""
    return WarehouseConfig(
        account='acme-xy12345',
        user='loader',
        password='p@ss word',
        warehouse='LOAD_WH',
        role='LOADER',
        database='RENTALDB',
        source_schema='SRC',
        staging_schema='STAGING',
        config_stage='RENTAL_STAGE',
        config_file='config.json',
        config_file_format='jsonconfig_format'
    )


@pytest.fixture
def settings():
    """Default staging settings (_FIVETRAN_DELETED / _FIVETRAN_SYNCED markers)."""
    return StagingSettings()


@pytest.fixture
def sample_config():
    """
    Raw configuration document.

    RAOHDR has a single key, RAODET a composite key and CUSTMAST has no
    column map at all.
    """
    return {
        'tables': [
            {'original_name': 'RAOHDR', 'full_form_name': 'RENTAL_HEADER', 'primary_keys': ['ORDER_NO']},
            {'original_name': 'CUSTMAST', 'full_form_name': 'CUSTOMER_MASTER', 'primary_keys': ['CUST_NO']},
            {'original_name': 'RAODET', 'full_form_name': 'RENTAL_DETAIL', 'primary_keys': ['ORDER_NO', 'LINE_NO_']},
        ],
        'RAOHDR': {
            'ORDER_NO': {'type': 'DECIMAL', 'length': 9, 'numeric_scale': 0},
            'CUST_NAME': {'type': 'CHAR', 'length': 30},
            'ORDER_DATE': {'type': 'DATE'},
            '_FIVETRAN_DELETED': {'type': 'BOOLEAN'},
            '_FIVETRAN_SYNCED': {'type': 'TIMESTAMP'},
        },
        'RAODET': {
            'ORDER_NO': {'type': 'DECIMAL', 'length': 9, 'numeric_scale': 0},
            'LINE_NO_': {'type': 'BIGINT', 'length': 18},
            'QTY': {'type': 'NUMERIC', 'length': 7},
            '_FIVETRAN_DELETED': {'type': 'BOOLEAN'},
            '_FIVETRAN_SYNCED': {'type': 'TIMESTAMP'},
        },
    }


@pytest.fixture
def config_file(tmp_path, sample_config):
    """sample_config written to tmp_path/config.json."""
    path = tmp_path / 'config.json'
    path.write_text(json.dumps(sample_config), encoding='utf-8')
    return path
