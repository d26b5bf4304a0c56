"""
=================================================
Core infrastructure package for the staging pipeline.
=================================================

This package provides centralized configuration management, logging
infrastructure and the exception hierarchy used throughout the project.

Modules:
    config: Configuration management from environment variables
    logger: Centralized logging configuration and utilities
    exceptions: Error taxonomy mapped onto run status categories

Example:
    >>> from core.config import config
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Staging schema: {config.staging_schema}")
"""

__version__ = "0.1.0"
__all__ = [
    'get_logger', 'setup_logging', 'log_banner', 'config', 'Config',
    'StagingError', 'ConfigError', 'QueryBuildError',
    'ExecutionError', 'SkippableConfigGap'
]

from core.config import Config, config
from core.exceptions import (
    ConfigError,
    ExecutionError,
    QueryBuildError,
    SkippableConfigGap,
    StagingError,
)
from core.logger import get_logger, log_banner, setup_logging
