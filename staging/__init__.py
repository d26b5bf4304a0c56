"""
========================================================
Staging Layer Package
========================================================

Moves CDC-replicated source tables into the warehouse staging schema,
either by full re-materialization or by incremental merge.

Modules:
    loader: StagingManager and the zero-argument load entry points

Example:
    >>> from staging.loader import incremental_process_staging_data
    >>>
    >>> print(incremental_process_staging_data())
"""

__version__ = "0.1.0"
__all__ = ['StagingManager', 'process_staging_data', 'incremental_process_staging_data']

from staging.loader import (
    StagingManager,
    incremental_process_staging_data,
    process_staging_data,
)
