"""
==========================
Utility Functions Package.
==========================

Warehouse connectivity, statement execution and configuration document
loading for the staging pipeline.

Modules:
    database_utils: Engine creation, health checks and executors
    config_loader: Read and parse the table/column configuration document
"""

__version__ = "1.0.0"
__all__ = [
    'get_connection_string',
    'create_sqlalchemy_engine',
    'verify_connection',
    'WarehouseExecutor',
    'DryRunExecutor',
    'load_config_document',
    'parse_config_document',
    'stage_config_query'
]

from .config_loader import load_config_document, parse_config_document, stage_config_query
from .database_utils import (
    DryRunExecutor,
    WarehouseExecutor,
    create_sqlalchemy_engine,
    get_connection_string,
    verify_connection,
)
