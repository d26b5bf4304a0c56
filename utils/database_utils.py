"""
==================================================
Warehouse connectivity and statement execution.
==================================================

Provides the connection helpers and the executors the staging pipeline
submits its generated statements to.

This module abstracts warehouse connection logic from SQL synthesis,
so the builders never touch a connection and tests can swap in a
recording executor.

Key Features:
    - Connection string building from config
    - SQLAlchemy engine creation
    - Connection health check
    - WarehouseExecutor: one transaction per statement, driver errors
      wrapped into ExecutionError
    - DryRunExecutor: records statements without running them

Example:
    >>> from utils.database_utils import create_sqlalchemy_engine, WarehouseExecutor
    >>>
    >>> engine = create_sqlalchemy_engine()
    >>> executor = WarehouseExecutor(engine)
    >>> rows = executor.execute("SELECT CURRENT_VERSION()")
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from core.config import config
from core.exceptions import ExecutionError

logger = logging.getLogger(__name__)


def get_connection_string(warehouse=None) -> str:
    """
    Build the warehouse connection string.

    Args:
        warehouse: WarehouseConfig (defaults to config.warehouse)

    Returns:
        SQLAlchemy connection string
    """
    warehouse = warehouse or config.warehouse
    return warehouse.get_connection_string()


def create_sqlalchemy_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the warehouse.

    Args:
        url: Connection string (defaults to the configured warehouse)
        echo: Enable SQL statement logging

    Returns:
        Configured SQLAlchemy Engine

    Example:
        >>> engine = create_sqlalchemy_engine('sqlite://')
        >>> with engine.connect() as conn:
        ...     result = conn.execute(text("SELECT 1"))
    """
    return create_engine(
        url or get_connection_string(),
        echo=echo,
        pool_pre_ping=True  # Verify connections before using
    )


def get_connection_info(url: Optional[str] = None) -> dict:
    """
    Describe the configured connection without exposing the password.

    Returns:
        Dictionary with dialect, host (account), database and user
    """
    parsed = make_url(url or get_connection_string())
    return {
        'dialect': parsed.get_backend_name(),
        'host': parsed.host,
        'database': parsed.database,
        'user': parsed.username,
        'url': parsed.render_as_string(hide_password=True)
    }


def verify_connection(engine: Optional[Engine] = None) -> Tuple[bool, str]:
    """
    Verify the warehouse answers a trivial query.

    Returns:
        Tuple of (success, message)

    Example:
        >>> success, message = verify_connection(engine)
        >>> if not success:
        ...     print(f"❌ {message}")
    """
    try:
        engine = engine or create_sqlalchemy_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, f"Connected to {engine.url.render_as_string(hide_password=True)}"
    except SQLAlchemyError as e:
        logger.debug(f"Warehouse not available: {e}")
        return False, f"Connection failed: {e}"


class WarehouseExecutor:
    """
    Runs generated statements against the warehouse.

    Each statement is executed in its own transaction; statements are
    submitted one at a time in the order they are given.

    Attributes:
        engine: SQLAlchemy engine
    """

    def __init__(self, engine: Optional[Engine] = None):
        """
        Args:
            engine: SQLAlchemy engine (defaults to the configured warehouse)

        Raises:
            ExecutionError: If no engine can be created for the configured URL
        """
        if engine is None:
            try:
                engine = create_sqlalchemy_engine()
            except SQLAlchemyError as e:
                raise ExecutionError(f"Failed to create warehouse engine: {e}") from e
        self.engine = engine

    def execute(self, sql: str, table: Optional[str] = None) -> List[Sequence[Any]]:
        """
        Execute one statement.

        Args:
            sql: Statement text
            table: Table the statement belongs to, for error context

        Returns:
            Fetched rows, empty when the statement returns none

        Raises:
            ExecutionError: If the warehouse rejects the statement
        """
        logger.debug(f"Executing: {sql}")
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(sql))
                return list(result.fetchall()) if result.returns_rows else []
        except SQLAlchemyError as e:
            raise ExecutionError(str(e), table=table, statement=sql) from e

    def close(self) -> None:
        """Dispose of the engine's connections."""
        if self.engine:
            self.engine.dispose()
            logger.info("🔌 Warehouse connections closed")


class DryRunExecutor:
    """
    Records statements instead of running them.

    Attributes:
        statements: Every statement submitted, in order
        rows: Rows returned by each execute() call
    """

    def __init__(self, rows: Optional[List[Sequence[Any]]] = None):
        self.statements: List[str] = []
        self.rows = rows or []

    def execute(self, sql: str, table: Optional[str] = None) -> List[Sequence[Any]]:
        self.statements.append(sql)
        return list(self.rows)

    def close(self) -> None:
        pass
