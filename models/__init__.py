"""
==============================================
Data models for the CDC staging pipeline.
==============================================

Dataclasses shared by the SQL builders, the configuration loader and the
orchestrator. Kept in one package so that `sql` and `staging` can both
import them without depending on each other.

Example:
    >>> from models.staging_models import TableConfig, ColumnTypeSpec
    >>>
    >>> table = TableConfig('RAOHDR', 'RENTAL_HEADER', ('ORDER_NO',))
    >>> spec = ColumnTypeSpec.from_dict({'type': 'DECIMAL', 'length': 10, 'numeric_scale': 2})
"""

__version__ = "0.1.0"
__all__ = [
    'TableConfig', 'ColumnTypeSpec', 'ColumnMap', 'ConfigDocument',
    'SelectItem', 'SyntheticQuery', 'MergeBranch', 'MergePlan',
    'TableResult', 'QueryMode', 'MergeAction', 'TableStatus',
    'summarize_results'
]

from models.staging_models import (
    ColumnMap,
    ColumnTypeSpec,
    ConfigDocument,
    MergeAction,
    MergeBranch,
    MergePlan,
    QueryMode,
    SelectItem,
    SyntheticQuery,
    TableConfig,
    TableResult,
    TableStatus,
    summarize_results,
)
