"""
=====================================================
Data model for staging SQL synthesis and merge plans.
=====================================================

Plain dataclasses describing the configuration document, the synthesized
queries and the per-table outcome of a run. Configuration objects are
frozen: they are created once from the document and never mutated.

Classes:
    TableConfig: One replicated table from the configuration document
    ColumnTypeSpec: Source type descriptor of one column
    ConfigDocument: Parsed configuration document
    SelectItem: One `expression AS alias` entry of a SELECT list
    SyntheticQuery: Generated SELECT text plus its provenance
    MergeBranch: One WHEN clause of the incremental MERGE
    MergePlan: Dedup subquery, incremental filter and MERGE statement
    TableResult: Outcome of processing one table in a run
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class QueryMode(str, Enum):
    """Synthesis mode of a source query."""
    FULL = 'FULL'
    INCREMENTAL_SOURCE = 'INCREMENTAL_SOURCE'


class MergeAction(str, Enum):
    """Action taken by a MERGE branch."""
    DELETE = 'DELETE'
    UPDATE = 'UPDATE'
    INSERT = 'INSERT'


class TableStatus(str, Enum):
    """Lifecycle status of one table within a run."""
    PENDING = 'PENDING'
    SUCCESS = 'SUCCESS'
    SKIPPED = 'SKIPPED'
    FAILED = 'FAILED'


@dataclass(frozen=True)
class TableConfig:
    """One replicated table.

    Attributes:
        original_name: Table name in the replicated source schema
        full_form_name: Descriptive table name used in the staging schema
        primary_keys: Ordered raw primary-key column names
    """

    original_name: str
    full_form_name: str
    primary_keys: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TableConfig':
        return cls(
            original_name=data['original_name'],
            full_form_name=data['full_form_name'],
            primary_keys=tuple(data.get('primary_keys') or ())
        )


@dataclass(frozen=True)
class ColumnTypeSpec:
    """Source type descriptor of a column.

    `type` stays None when the document omits it; the cast builder reports
    that as a query build error for the owning table.
    """

    type: Optional[str]
    length: Optional[int] = None
    numeric_scale: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ColumnTypeSpec':
        return cls(
            type=data.get('type'),
            length=data.get('length'),
            numeric_scale=data.get('numeric_scale')
        )


# Column name -> type descriptor, iteration order drives the SELECT list
ColumnMap = Dict[str, ColumnTypeSpec]


@dataclass(frozen=True)
class ConfigDocument:
    """Parsed configuration document.

    Attributes:
        tables: Table configurations in document order
        column_maps: Column map per original table name
    """

    tables: Tuple[TableConfig, ...]
    column_maps: Dict[str, ColumnMap] = field(default_factory=dict)

    def column_map(self, table_name: str) -> Optional[ColumnMap]:
        """Column map of a table, or None when absent or empty."""
        return self.column_maps.get(table_name) or None


@dataclass(frozen=True)
class SelectItem:
    """One entry of a SELECT list.

    Attributes:
        expression: SQL expression
        alias: Output alias, None when the expression is emitted bare
    """

    expression: str
    alias: Optional[str] = None

    @property
    def output_name(self) -> str:
        """Name of the resulting column."""
        return self.alias if self.alias is not None else self.expression

    def render(self) -> str:
        if self.alias is None:
            return self.expression
        return f"{self.expression} AS {self.alias}"


@dataclass(frozen=True)
class SyntheticQuery:
    """Generated SELECT over a source table.

    Attributes:
        sql: SELECT text without a trailing semicolon
        table: Table the query was synthesized for
        mode: Synthesis mode
        items: Structured SELECT list the text was rendered from
    """

    sql: str
    table: TableConfig
    mode: QueryMode
    items: Tuple[SelectItem, ...] = ()


@dataclass(frozen=True)
class MergeBranch:
    """One WHEN clause of the incremental MERGE.

    Attributes:
        matched: True for WHEN MATCHED, False for WHEN NOT MATCHED
        source_deleted: Required value of the source soft-delete marker
        target_deleted: Required value of the target soft-delete marker,
            None when the branch does not look at the target
        action: Action applied when the branch fires
    """

    matched: bool
    source_deleted: bool
    target_deleted: Optional[bool]
    action: MergeAction

    def applies(self, matched: bool, source_deleted: bool, target_deleted: Optional[bool] = None) -> bool:
        """Whether this branch fires for a row in the given state."""
        if self.matched != matched or self.source_deleted != source_deleted:
            return False
        return self.target_deleted is None or self.target_deleted == target_deleted


@dataclass(frozen=True)
class MergePlan:
    """Incremental merge artifacts for one table.

    Attributes:
        dedup_subquery: Per-key maximum sync timestamp over the staging table
        incremental_filter: Source rows newer than their key's maximum
        merge_statement: Complete MERGE INTO statement
        branches: WHEN clauses in evaluation order
    """

    dedup_subquery: str
    incremental_filter: str
    merge_statement: str
    branches: Tuple[MergeBranch, ...] = ()


@dataclass
class TableResult:
    """Outcome of processing one table.

    Attributes:
        table: Table configuration
        mode: 'FULL' or 'INCREMENTAL'
        status: Current status
        statement: Generated statement to run, if built
        error: Error message for skipped or failed tables
        error_category: Exception class name of the failure
    """

    table: TableConfig
    mode: str
    status: TableStatus = TableStatus.PENDING
    statement: Optional[str] = None
    error: Optional[str] = None
    error_category: Optional[str] = None

    @property
    def table_name(self) -> str:
        return self.table.original_name


def summarize_results(results: List[TableResult]) -> Dict[str, int]:
    """Count results per status."""
    counts = {status.value: 0 for status in TableStatus}
    for result in results:
        counts[result.status.value] += 1
    return counts
