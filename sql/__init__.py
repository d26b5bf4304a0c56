"""
====================================================
SQL utilities package for staging synthesis.
====================================================

This package provides the builders that turn a table configuration into
warehouse SQL. All functions generate SQL strings without side effects;
executing them is the caller's business.

The package follows a clear organization:
    - type_cast.py: Source type descriptor -> CAST expression
    - aliases.py: Alias/identifier normalization shared by every builder
    - query_builder.py: Per-table source SELECT (FULL / INCREMENTAL_SOURCE)
    - ddl.py: CREATE OR REPLACE TABLE ... AS SELECT for full loads
    - dml.py: Dedup snapshot, incremental filter and MERGE planning

Example:
    >>> from sql.query_builder import QuerySynthesizer
    >>> from sql.dml import IncrementalMergePlanner
    >>> from models.staging_models import QueryMode
    >>>
    >>> query = QuerySynthesizer().synthesize(table, column_map, QueryMode.INCREMENTAL_SOURCE)
    >>> plan = IncrementalMergePlanner().plan(query, table, column_map)
"""

__version__ = "1.0.0"
__all__ = [
    'TypeCastBuilder', 'normalize_identifier', 'sanitize_aliases',
    'sanitize_select_items', 'QuerySynthesizer', 'select_builder',
    'create_table_as_select', 'IncrementalMergePlanner', 'merge_statement',
    'build_merge_on_clause', 'resolve_merge_action'
]

from .aliases import normalize_identifier, sanitize_aliases, sanitize_select_items
from .ddl import create_table_as_select
from .dml import (
    IncrementalMergePlanner,
    build_merge_on_clause,
    merge_statement,
    resolve_merge_action,
)
from .query_builder import QuerySynthesizer, select_builder
from .type_cast import TypeCastBuilder
