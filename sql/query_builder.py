"""
============================
Staging query synthesis.
============================

Composes the per-table SELECT that reads a replicated source table with
every column cast to its warehouse type.

Query Builders:
- qualified_name_builder: Join database/schema/object parts
- select_list_builder: Render a structured SELECT list
- select_builder: Build a SELECT over one source table

Synthesis:
- QuerySynthesizer: Turn a table configuration and its column map into a
  sanitized SyntheticQuery, in FULL or INCREMENTAL_SOURCE mode

FULL mode keeps only live rows (the first materialization has nothing to
delete). INCREMENTAL_SOURCE mode keeps deleted rows too so the MERGE can
remove them from staging.

Usage:
    from sql.query_builder import QuerySynthesizer
    from models.staging_models import QueryMode

    synthesizer = QuerySynthesizer()
    query = synthesizer.synthesize(table, column_map, QueryMode.FULL)
    print(query.sql)
"""

import logging
from typing import Iterable, List, Optional

from core.exceptions import SkippableConfigGap
from models.staging_models import ColumnMap, QueryMode, SelectItem, SyntheticQuery, TableConfig
from sql.aliases import sanitize_select_items
from sql.type_cast import TypeCastBuilder

logger = logging.getLogger(__name__)


def qualified_name_builder(*parts: str) -> str:
    """Join non-empty name parts with dots, e.g. DB.SCHEMA.TABLE."""
    return '.'.join(part for part in parts if part)


def select_list_builder(items: Iterable[SelectItem]) -> str:
    """Render SELECT items as a comma-separated list."""
    return ', '.join(item.render() for item in items)


def select_builder(
    source_table: str,
    items: Iterable[SelectItem],
    where_conditions: Optional[List[str]] = None
) -> str:
    """
    Build a SELECT statement over a single table.

    Args:
        source_table: Fully-qualified table name
        items: Structured SELECT list
        where_conditions: Conditions joined with AND

    Returns:
        SELECT text without a trailing semicolon
    """
    sql = f"SELECT {select_list_builder(items)} FROM {source_table}"

    if where_conditions:
        sql += " WHERE " + " AND ".join(where_conditions)

    return sql


class QuerySynthesizer:
    """
    Synthesizes the source SELECT of a staging table.

    Attributes:
        cast_builder: TypeCastBuilder producing the SELECT list
        warehouse: WarehouseConfig resolving fully-qualified names
        settings: StagingSettings with marker columns

    Example:
        >>> synthesizer = QuerySynthesizer()
        >>> query = synthesizer.synthesize(table, column_map, QueryMode.INCREMENTAL_SOURCE)
        >>> query.sql.startswith('SELECT')
        True
    """

    def __init__(self, cast_builder=None, warehouse=None, settings=None):
        from core.config import config

        self.settings = settings or config.staging
        self.warehouse = warehouse or config.warehouse
        self.cast_builder = cast_builder or TypeCastBuilder(
            type_map=self.settings.type_map,
            passthrough_types=self.settings.passthrough_types
        )

    def live_rows_condition(self) -> str:
        """Predicate keeping rows that are not soft-deleted at the source."""
        return f"{self.settings.soft_delete_column} = {self.settings.live_row_value}"

    def synthesize(
        self,
        table: TableConfig,
        column_map: Optional[ColumnMap],
        mode: QueryMode
    ) -> SyntheticQuery:
        """
        Build the sanitized source query of a table.

        Args:
            table: Table configuration
            column_map: Column map of the table
            mode: FULL or INCREMENTAL_SOURCE

        Returns:
            SyntheticQuery whose aliases are already normalized

        Raises:
            SkippableConfigGap: If the table has no column map
            QueryBuildError: If a column type cannot be rendered
        """
        if not column_map:
            raise SkippableConfigGap(
                f"No config found for {table.original_name}, skipping...",
                table=table.original_name
            )

        items = sanitize_select_items(
            self.cast_builder.build_select_items(table.original_name, column_map)
        )

        where_conditions = [self.live_rows_condition()] if mode == QueryMode.FULL else None

        sql = select_builder(
            source_table=self.warehouse.source_table(table.original_name),
            items=items,
            where_conditions=where_conditions
        )

        logger.debug(f"Synthesized {mode.value} query for {table.original_name}: {sql}")
        return SyntheticQuery(sql=sql, table=table, mode=mode, items=tuple(items))
