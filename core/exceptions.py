"""
=============================================
Exception hierarchy for the staging pipeline.
=============================================

Every failure raised while loading configuration, synthesizing SQL or
running statements derives from StagingError so the orchestrator can map
it onto a status category.

Classes:
    StagingError: Base class, optionally bound to a table
    ConfigError: Configuration document or settings are unusable (fatal)
    QueryBuildError: A column type descriptor cannot be rendered (fatal)
    ExecutionError: The warehouse rejected a generated statement (fatal)
    SkippableConfigGap: Table lacks a column map or primary keys (skipped)
"""

from typing import Optional


class StagingError(Exception):
    """Base exception for staging pipeline errors.

    Attributes:
        table: Original name of the table involved, if any
    """

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(message)
        self.table = table


class ConfigError(StagingError):
    """Configuration document missing, malformed, or inconsistent."""
    pass


class QueryBuildError(StagingError):
    """A column's type descriptor cannot be resolved into a cast."""
    pass


class ExecutionError(StagingError):
    """The warehouse rejected a generated statement.

    Attributes:
        statement: SQL text that failed
    """

    def __init__(self, message: str, table: Optional[str] = None, statement: Optional[str] = None):
        super().__init__(message, table=table)
        self.statement = statement


class SkippableConfigGap(StagingError):
    """A table cannot be processed but the run may continue without it."""
    pass
