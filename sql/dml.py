"""
===========================================
Data Manipulation Language (DML) Utilities.
===========================================

Incremental merge planning for staging tables fed by CDC replication.
A plan has three stages:

1. Dedup snapshot: per primary key, the latest sync timestamp already
   applied to the staging table.
2. Incremental filter: source rows whose sync timestamp is newer than
   their key's snapshot, or whose key has never been seen.
3. Conditional MERGE on the composite key, honoring soft deletes.

The MERGE branches are data (INCREMENTAL_MERGE_BRANCHES) evaluated in
order, first match wins:

    matched,     source deleted, target live  -> DELETE
    matched,     source live                  -> UPDATE non-key columns
    not matched, source live                  -> INSERT full row
    not matched, source deleted               -> nothing

A matched row already marked deleted in staging receiving another delete
has no branch and is left untouched.

Functions:
- key_join_builder: Equality conjunction over key columns
- build_merge_on_clause: MERGE ON clause for raw primary keys
- dedup_subquery: Stage 1 SQL
- incremental_filter: Stage 2 SQL
- merge_statement: Stage 3 SQL
- resolve_merge_action: Action the branch list takes for a row state

Usage:
    from sql.dml import IncrementalMergePlanner

    plan = IncrementalMergePlanner().plan(query, table, column_map)
    executor.execute(plan.merge_statement)
"""

import logging
from typing import Iterable, Optional, Sequence

from core.exceptions import SkippableConfigGap
from models.staging_models import (
    ColumnMap,
    MergeAction,
    MergeBranch,
    MergePlan,
    QueryMode,
    SyntheticQuery,
    TableConfig,
)
from sql.aliases import normalize_identifier, normalize_identifiers

logger = logging.getLogger(__name__)

MAX_SYNCED_ALIAS = 'MAX_SYNCED'

INCREMENTAL_MERGE_BRANCHES = (
    MergeBranch(matched=True, source_deleted=True, target_deleted=False, action=MergeAction.DELETE),
    MergeBranch(matched=True, source_deleted=False, target_deleted=None, action=MergeAction.UPDATE),
    MergeBranch(matched=False, source_deleted=False, target_deleted=None, action=MergeAction.INSERT),
)


def resolve_merge_action(
    matched: bool,
    source_deleted: bool,
    target_deleted: Optional[bool] = None,
    branches: Sequence[MergeBranch] = INCREMENTAL_MERGE_BRANCHES
) -> Optional[MergeAction]:
    """
    Action of the first branch that applies to a row state.

    Args:
        matched: Whether the source row matched a staging row
        source_deleted: Soft-delete flag of the source row
        target_deleted: Soft-delete flag of the matched staging row
        branches: Branches in evaluation order

    Returns:
        The MergeAction, or None when no branch applies
    """
    for branch in branches:
        if branch.applies(matched, source_deleted, target_deleted):
            return branch.action
    return None


def key_join_builder(key_columns: Iterable[str], left_alias: str, right_alias: str) -> str:
    """Build `l.k1 = r.k1 AND l.k2 = r.k2` for already-normalized key columns."""
    return " AND ".join(f"{left_alias}.{col} = {right_alias}.{col}" for col in key_columns)


def build_merge_on_clause(
    keys: Iterable[str],
    target_alias: str = "target",
    source_alias: str = "source"
) -> str:
    """
    Build the MERGE ON clause for raw primary-key names.

    Key names are normalized the same way aliases are, so the condition
    refers to the columns present in the staging table.
    """
    return key_join_builder(normalize_identifiers(keys), target_alias, source_alias)


def dedup_subquery(staging_table: str, key_columns: Sequence[str], synced_column: str) -> str:
    """
    Per-key maximum sync timestamp over the staging table.

    Args:
        staging_table: Fully-qualified staging table
        key_columns: Normalized primary-key columns
        synced_column: Normalized sync timestamp column

    Returns:
        SELECT text grouped by the key columns
    """
    pk_columns = ", ".join(key_columns)
    return f"""SELECT {pk_columns}, MAX({synced_column}) AS {MAX_SYNCED_ALIAS}
FROM {staging_table}
GROUP BY {pk_columns}"""


def incremental_filter(
    source_query: str,
    snapshot_query: str,
    key_columns: Sequence[str],
    synced_column: str
) -> str:
    """
    Source rows newer than the staging snapshot of their key.

    A key with no snapshot row has no prior maximum and always passes,
    whatever its sync timestamp.

    Args:
        source_query: Sanitized INCREMENTAL_SOURCE SELECT
        snapshot_query: Dedup snapshot SELECT
        key_columns: Normalized primary-key columns
        synced_column: Normalized sync timestamp column

    Returns:
        SELECT text over the filtered source rows
    """
    return f"""SELECT src.*
FROM ({source_query}) AS src
LEFT JOIN ({snapshot_query}) AS max_sync
    ON {key_join_builder(key_columns, 'src', 'max_sync')}
WHERE max_sync.{MAX_SYNCED_ALIAS} IS NULL
   OR src.{synced_column} > max_sync.{MAX_SYNCED_ALIAS}"""


def branch_condition_builder(branch: MergeBranch, deleted_column: str) -> str:
    """Render the WHEN clause head of a branch."""
    head = "WHEN MATCHED" if branch.matched else "WHEN NOT MATCHED"
    conditions = [f"source.{deleted_column} = {'TRUE' if branch.source_deleted else 'FALSE'}"]
    if branch.target_deleted is not None:
        conditions.append(f"target.{deleted_column} = {'TRUE' if branch.target_deleted else 'FALSE'}")
    return f"{head} AND {' AND '.join(conditions)}"


def merge_statement(
    staging_table: str,
    source_query: str,
    key_columns: Sequence[str],
    insert_columns: Sequence[str],
    deleted_column: str,
    update_columns: Optional[Sequence[str]] = None,
    branches: Sequence[MergeBranch] = INCREMENTAL_MERGE_BRANCHES
) -> str:
    """
    Generate the MERGE INTO statement.

    Args:
        staging_table: Fully-qualified target table
        source_query: Incremental rows to merge
        key_columns: Normalized primary-key columns
        insert_columns: Normalized columns of the full row
        deleted_column: Normalized soft-delete column
        update_columns: Columns updated on match (defaults to non-key columns)
        branches: WHEN clauses in evaluation order

    Returns:
        SQL MERGE statement
    """
    if update_columns is None:
        update_columns = [col for col in insert_columns if col not in key_columns]

    clauses = []
    for branch in branches:
        condition = branch_condition_builder(branch, deleted_column)

        if branch.action == MergeAction.DELETE:
            clauses.append(f"{condition} THEN\n    DELETE")
        elif branch.action == MergeAction.UPDATE:
            if not update_columns:
                logger.debug(f"No non-key columns in {staging_table}, UPDATE branch omitted")
                continue
            update_set = ", ".join(f"{col} = source.{col}" for col in update_columns)
            clauses.append(f"{condition} THEN\n    UPDATE SET {update_set}")
        else:
            insert_cols = ", ".join(insert_columns)
            insert_vals = ", ".join(f"source.{col}" for col in insert_columns)
            clauses.append(f"{condition} THEN\n    INSERT ({insert_cols})\n    VALUES ({insert_vals})")

    return f"""MERGE INTO {staging_table} AS target
USING ({source_query}) AS source
ON {key_join_builder(key_columns, 'target', 'source')}
""" + "\n".join(clauses) + ";"


class IncrementalMergePlanner:
    """
    Plans the incremental MERGE of one staging table.

    Stateless: every call to plan() derives its output from its arguments
    and the configured settings only.

    Attributes:
        warehouse: WarehouseConfig resolving staging table names
        settings: StagingSettings with marker columns
        branches: MERGE branches in evaluation order
    """

    def __init__(self, warehouse=None, settings=None, branches: Sequence[MergeBranch] = INCREMENTAL_MERGE_BRANCHES):
        from core.config import config

        self.warehouse = warehouse or config.warehouse
        self.settings = settings or config.staging
        self.branches = tuple(branches)

    def plan(self, query: SyntheticQuery, table: TableConfig, column_map: ColumnMap) -> MergePlan:
        """
        Build the dedup, filter and MERGE statements for a table.

        Args:
            query: Sanitized INCREMENTAL_SOURCE query of the table
            table: Table configuration (primary keys, staging name)
            column_map: Column map giving the full column list

        Returns:
            MergePlan for the table

        Raises:
            SkippableConfigGap: If the table has no primary keys
            ValueError: If the query was not synthesized in INCREMENTAL_SOURCE mode
        """
        if not table.primary_keys:
            raise SkippableConfigGap(
                f"No primary keys defined for table {table.original_name}, skipping merge...",
                table=table.original_name
            )

        if query.mode != QueryMode.INCREMENTAL_SOURCE:
            raise ValueError(
                f"Incremental merge needs an {QueryMode.INCREMENTAL_SOURCE.value} query, got {query.mode.value}"
            )

        staging_table = self.warehouse.staging_table(table.full_form_name)
        # Staging columns are named after the SELECT items, bare passthrough columns included
        output_names = dict(zip(column_map, (item.output_name for item in query.items)))
        key_columns = [output_names.get(pk, normalize_identifier(pk)) for pk in table.primary_keys]
        all_columns = [item.output_name for item in query.items]
        synced_column = self.settings.synced_marker
        deleted_column = self.settings.deleted_marker

        snapshot_sql = dedup_subquery(staging_table, key_columns, synced_column)
        logger.debug(f"Max synced query per ID for {table.original_name}: {snapshot_sql}")

        filter_sql = incremental_filter(query.sql, snapshot_sql, key_columns, synced_column)
        logger.debug(f"Incremental filter for {table.original_name}: {filter_sql}")

        merge_sql = merge_statement(
            staging_table=staging_table,
            source_query=filter_sql,
            key_columns=key_columns,
            insert_columns=all_columns,
            deleted_column=deleted_column,
            branches=self.branches
        )

        return MergePlan(
            dedup_subquery=snapshot_sql,
            incremental_filter=filter_sql,
            merge_statement=merge_sql,
            branches=self.branches
        )
