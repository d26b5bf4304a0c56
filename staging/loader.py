"""
=================================================
Staging Layer Manager for CDC replicated tables
=================================================

Orchestrates the movement of replicated source tables into the staging
schema, in two modes:

    FULL:         source SELECT (live rows) → CREATE OR REPLACE TABLE ... AS
    INCREMENTAL:  source SELECT (all rows) → dedup snapshot → incremental
                  filter → MERGE with soft-delete handling

Architecture:
    Config document → QuerySynthesizer → (IncrementalMergePlanner) → Executor

Run contract:
    - Tables are processed sequentially in configuration order.
    - Every statement is built before the first one is executed; a query
      build error aborts the run with nothing executed.
    - Tables without a column map (or, incrementally, without primary keys)
      are skipped with a warning.
    - Execution stops at the first rejected statement unless the manager
      was created with continue_on_error. Statements already executed stay
      applied; there is no cross-table rollback. Merges are idempotent so
      a failed run can simply be re-run.

Example:
    >>> from staging.loader import StagingManager
    >>>
    >>> manager = StagingManager()
    >>> status = manager.run_incremental_load()
    >>> print(status)
    ✅ All staging tables incremental load completed successfully!
"""

from pathlib import Path
from typing import List, Optional, Union

from core.config import config
from core.exceptions import (
    ExecutionError,
    QueryBuildError,
    SkippableConfigGap,
    StagingError,
)
from core.logger import get_logger, log_banner
from models.staging_models import (
    ConfigDocument,
    QueryMode,
    TableConfig,
    TableResult,
    TableStatus,
    summarize_results,
)
from sql.ddl import create_table_as_select
from sql.dml import IncrementalMergePlanner
from sql.query_builder import QuerySynthesizer
from utils.config_loader import load_config_document, parse_config_document
from utils.database_utils import WarehouseExecutor

logger = get_logger(__name__)

FULL_MODE = 'FULL'
INCREMENTAL_MODE = 'INCREMENTAL'

SUCCESS_MESSAGES = {
    FULL_MODE: "✅ All staging tables processed and renamed successfully.",
    INCREMENTAL_MODE: "✅ All staging tables incremental load completed successfully!",
}


class StagingManager:
    """
    Builds and runs staging statements for every configured table.

    Attributes:
        warehouse: WarehouseConfig resolving object names
        settings: StagingSettings with marker columns and type map
        synthesizer: QuerySynthesizer for source SELECTs
        planner: IncrementalMergePlanner for MERGE statements
        continue_on_error: Keep executing remaining tables after a failure
        last_results: Per-table results of the most recent run

    Example:
        >>> manager = StagingManager(executor=DryRunExecutor())
        >>> manager.run_full_load(path='config.json')
        '✅ All staging tables processed and renamed successfully.'
    """

    def __init__(
        self,
        executor=None,
        warehouse=None,
        settings=None,
        cast_builder=None,
        continue_on_error: bool = False
    ):
        self.warehouse = warehouse or config.warehouse
        self.settings = settings or config.staging
        self.continue_on_error = continue_on_error
        self._executor = executor

        self.synthesizer = QuerySynthesizer(
            cast_builder=cast_builder,
            warehouse=self.warehouse,
            settings=self.settings
        )
        self.planner = IncrementalMergePlanner(warehouse=self.warehouse, settings=self.settings)
        self.last_results: List[TableResult] = []

    @property
    def executor(self):
        """Executor for generated statements, connected on first use."""
        if self._executor is None:
            self._executor = WarehouseExecutor()
        return self._executor

    def load_configuration(self, path: Optional[Union[str, Path]] = None) -> ConfigDocument:
        """
        Load and parse the configuration document.

        Args:
            path: Local JSON file; the warehouse stage is read when omitted

        Returns:
            Parsed ConfigDocument

        Raises:
            ConfigError: If the document is missing or malformed
            ExecutionError: If the stage cannot be read
        """
        executor = None if path is not None else self.executor
        raw = load_config_document(executor=executor, path=path, warehouse=self.warehouse)
        return parse_config_document(raw)

    def _skipped(self, table: TableConfig, mode: str, gap: SkippableConfigGap) -> TableResult:
        logger.warning(str(gap))
        return TableResult(
            table=table,
            mode=mode,
            status=TableStatus.SKIPPED,
            error=str(gap),
            error_category=type(gap).__name__
        )

    def build_full_statement(self, table: TableConfig, document: ConfigDocument) -> TableResult:
        """
        Build the CTAS statement of one table.

        Raises:
            QueryBuildError: If a column type cannot be rendered
        """
        try:
            query = self.synthesizer.synthesize(table, document.column_map(table.original_name), QueryMode.FULL)
        except SkippableConfigGap as gap:
            return self._skipped(table, FULL_MODE, gap)

        statement = create_table_as_select(
            target_table=self.warehouse.staging_table(table.full_form_name),
            query=query.sql
        )
        return TableResult(table=table, mode=FULL_MODE, statement=statement)

    def build_incremental_statement(self, table: TableConfig, document: ConfigDocument) -> TableResult:
        """
        Build the MERGE statement of one table.

        Raises:
            QueryBuildError: If a column type cannot be rendered
        """
        column_map = document.column_map(table.original_name)
        try:
            query = self.synthesizer.synthesize(table, column_map, QueryMode.INCREMENTAL_SOURCE)
            plan = self.planner.plan(query, table, column_map)
        except SkippableConfigGap as gap:
            return self._skipped(table, INCREMENTAL_MODE, gap)

        return TableResult(table=table, mode=INCREMENTAL_MODE, statement=plan.merge_statement)

    def build_full_statements(self, document: ConfigDocument) -> List[TableResult]:
        """Build CTAS statements for every configured table, in order."""
        return [self.build_full_statement(table, document) for table in document.tables]

    def build_incremental_statements(self, document: ConfigDocument) -> List[TableResult]:
        """Build MERGE statements for every configured table, in order."""
        return [self.build_incremental_statement(table, document) for table in document.tables]

    def execute(self, results: List[TableResult]) -> List[TableResult]:
        """
        Execute every pending statement in order.

        Args:
            results: Results produced by a build phase

        Returns:
            The same results with updated statuses

        Raises:
            ExecutionError: On the first rejected statement, unless
                continue_on_error is set
        """
        for result in results:
            if result.status != TableStatus.PENDING:
                continue

            try:
                self.executor.execute(result.statement, table=result.table_name)
            except ExecutionError as e:
                result.status = TableStatus.FAILED
                result.error = str(e)
                result.error_category = type(e).__name__
                logger.error(f"❌ {result.mode} statement failed for {result.table_name}: {e}")
                if not self.continue_on_error:
                    raise
                continue

            result.status = TableStatus.SUCCESS
            if result.mode == FULL_MODE:
                logger.info(f"✅ Table {result.table_name} written to STAGING")
            else:
                logger.info(f"✅ Incremental MERGE applied to {result.table_name}")

        return results

    def run(self, mode: str, path: Optional[Union[str, Path]] = None) -> str:
        """
        Run a complete load and report a single status string.

        Args:
            mode: FULL_MODE or INCREMENTAL_MODE
            path: Optional local configuration file

        Returns:
            Human-readable status; the first failure category wins
        """
        log_banner(logger, f"🔵 STAGING {mode} LOAD")
        self.last_results = []

        try:
            document = self.load_configuration(path)
        except StagingError as e:
            logger.error(f"Error loading config: {e}", exc_info=True)
            return f"Error loading config: {e}"

        try:
            if mode == FULL_MODE:
                results = self.build_full_statements(document)
            else:
                results = self.build_incremental_statements(document)
        except QueryBuildError as e:
            logger.error(f"Error building queries: {e}", exc_info=True)
            return f"Error building queries: {e}"
        self.last_results = results

        try:
            self.execute(results)
        except ExecutionError as e:
            return f"Error executing final queries: {e}"

        failed = [result for result in results if result.status == TableStatus.FAILED]
        if failed:
            return f"Error executing final queries: {failed[0].error}"

        counts = summarize_results(results)
        logger.info(
            f"✅ STAGING {mode} LOAD COMPLETE: {counts[TableStatus.SUCCESS.value]} applied, "
            f"{counts[TableStatus.SKIPPED.value]} skipped"
        )

        status = SUCCESS_MESSAGES[mode]
        skipped = [result.table_name for result in results if result.status == TableStatus.SKIPPED]
        if skipped:
            status += f" ({len(skipped)} skipped: {', '.join(skipped)})"
        return status

    def run_full_load(self, path: Optional[Union[str, Path]] = None) -> str:
        """Re-materialize every staging table from live source rows."""
        return self.run(FULL_MODE, path)

    def run_incremental_load(self, path: Optional[Union[str, Path]] = None) -> str:
        """Merge rows changed since the last applied sync into staging."""
        return self.run(INCREMENTAL_MODE, path)

    def close(self):
        """Release the executor's connections."""
        if self._executor is not None:
            self._executor.close()


def process_staging_data() -> str:
    """Full load entry point using the environment configuration."""
    manager = StagingManager()
    try:
        return manager.run_full_load()
    finally:
        manager.close()


def incremental_process_staging_data() -> str:
    """Incremental load entry point using the environment configuration."""
    manager = StagingManager()
    try:
        return manager.run_incremental_load()
    finally:
        manager.close()
