"""
===========================================================
Configuration management for the CDC staging pipeline.
===========================================================

Loads all configuration from environment variables (.env file) and provides
a centralized Config singleton for application-wide access.

The configuration system ensures:
- Single source of truth for warehouse object locations
- Injectable source-type to warehouse-type mapping
- Marker column names shared by every generated statement
- Secure handling of sensitive credentials

Example:
    >>> from core.config import config
    >>>
    >>> # Fully-qualified object names
    >>> config.warehouse.source_table('RAOHDR')
    'RENTALDB.PROD_RENTALMAN_WSDATAIC.RAOHDR'
    >>>
    >>> # Normalized marker columns used in MERGE logic
    >>> print(config.staging.synced_marker)
    val_FIVETRAN_SYNCED
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple
from urllib.parse import quote_plus, urlencode

from dotenv import load_dotenv

from core.exceptions import ConfigError

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


# Source (Informer/AS400) type token -> warehouse type
DEFAULT_TYPE_MAP: Dict[str, str] = {
    'CHAR': 'VARCHAR',
    'DECIMAL': 'NUMBER',
    'BIGINT': 'NUMBER',
    'NUMERIC': 'NUMBER',
    'DATE': 'DATE',
    'BOOLEAN': 'BOOLEAN',
    'TIMESTAMP': 'TIMESTAMP_TZ',
}

# Type tokens whose columns are emitted without any cast
DEFAULT_PASSTHROUGH_TYPES: Tuple[str, ...] = ('TIMESTMP',)


def parse_type_map(raw: Optional[str]) -> Dict[str, str]:
    """Build the effective type map from an optional JSON override.

    Args:
        raw: JSON object text mapping source type tokens to warehouse types

    Returns:
        DEFAULT_TYPE_MAP overlaid with the override (keys upper-cased)

    Raises:
        ConfigError: If the override is not a JSON object
    """
    type_map = dict(DEFAULT_TYPE_MAP)
    if not raw:
        return type_map

    try:
        override = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"STAGING_TYPE_MAP is not valid JSON: {e}") from e

    if not isinstance(override, dict):
        raise ConfigError("STAGING_TYPE_MAP must be a JSON object of type -> type")

    type_map.update({str(k).upper(): str(v) for k, v in override.items()})
    return type_map


def parse_passthrough_types(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated list of passthrough type tokens."""
    if raw is None:
        return DEFAULT_PASSTHROUGH_TYPES
    return tuple(token.strip().upper() for token in raw.split(',') if token.strip())


@dataclass
class WarehouseConfig:
    """Warehouse connection and object location settings.

    Attributes:
        account: Snowflake account identifier
        user: Warehouse username
        password: Warehouse password
        warehouse: Compute warehouse name
        role: Role used for the session
        database: Database holding both source and staging schemas
        source_schema: Schema replicated by the CDC connector
        staging_schema: Schema receiving the staging tables
        config_stage: Named stage holding the configuration document
        config_file: Configuration document file name inside the stage
        config_file_format: File format object used to read the document
        url: Full SQLAlchemy URL, overrides the individual fields when set
    """

    account: str
    user: str
    password: str
    warehouse: str
    role: str
    database: str
    source_schema: str
    staging_schema: str
    config_stage: str
    config_file: str
    config_file_format: str
    url: Optional[str] = None

    def get_connection_string(self) -> str:
        """Get the SQLAlchemy connection string for the warehouse.

        Returns:
            WAREHOUSE_URL when configured, otherwise a snowflake:// URL
        """
        if self.url:
            return self.url

        query = {key: value for key, value in (('warehouse', self.warehouse), ('role', self.role)) if value}
        connection_string = (
            f"snowflake://{self.user}:{quote_plus(self.password)}"
            f"@{self.account}/{self.database}"
        )
        if query:
            connection_string += f"?{urlencode(query)}"
        return connection_string

    def source_table(self, table_name: str) -> str:
        """Fully-qualified name of a replicated source table."""
        return f"{self.database}.{self.source_schema}.{table_name}"

    def staging_table(self, table_name: str) -> str:
        """Fully-qualified name of a staging table."""
        return f"{self.database}.{self.staging_schema}.{table_name}"

    def config_stage_path(self) -> str:
        """Stage path of the configuration document, e.g. @DB.SCHEMA.STAGE/config.json."""
        return f"@{self.database}.{self.staging_schema}.{self.config_stage}/{self.config_file}"


@dataclass
class StagingSettings:
    """Settings that shape the generated staging SQL.

    Attributes:
        soft_delete_column: Raw name of the CDC soft-delete marker column
        sync_timestamp_column: Raw name of the CDC replication timestamp column
        live_row_value: SQL literal the soft-delete marker holds for live rows
        type_map: Source type token -> warehouse type
        passthrough_types: Type tokens emitted without a cast
    """

    soft_delete_column: str = '_FIVETRAN_DELETED'
    sync_timestamp_column: str = '_FIVETRAN_SYNCED'
    live_row_value: str = "'FALSE'"
    type_map: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TYPE_MAP))
    passthrough_types: Tuple[str, ...] = DEFAULT_PASSTHROUGH_TYPES

    @property
    def deleted_marker(self) -> str:
        """Soft-delete marker as it is named in staging tables."""
        from sql.aliases import normalize_identifier
        return normalize_identifier(self.soft_delete_column)

    @property
    def synced_marker(self) -> str:
        """Replication timestamp marker as it is named in staging tables."""
        from sql.aliases import normalize_identifier
        return normalize_identifier(self.sync_timestamp_column)

    @classmethod
    def from_env(cls) -> 'StagingSettings':
        """Build settings from environment variables.

        Raises:
            ConfigError: If STAGING_TYPE_MAP is malformed
        """
        return cls(
            soft_delete_column=os.getenv('SOFT_DELETE_COLUMN', '_FIVETRAN_DELETED'),
            sync_timestamp_column=os.getenv('SYNC_TIMESTAMP_COLUMN', '_FIVETRAN_SYNCED'),
            live_row_value=os.getenv('LIVE_ROW_VALUE', "'FALSE'"),
            type_map=parse_type_map(os.getenv('STAGING_TYPE_MAP')),
            passthrough_types=parse_passthrough_types(os.getenv('PASSTHROUGH_TYPES'))
        )


@dataclass
class ProjectConfig:
    """Project-wide configuration settings.

    Attributes:
        project_root: Absolute path to project root directory
        logs_dir: Path to logs directory
    """

    project_root: Path
    logs_dir: Path

    def ensure_directories(self) -> None:
        """Create the logs directory if it doesn't exist."""
        self.logs_dir.mkdir(parents=True, exist_ok=True)


class Config:
    """Centralized configuration manager.

    Provides access to all configuration settings loaded from environment
    variables (.env file).

    Attributes:
        warehouse: WarehouseConfig with connection and object locations
        staging: StagingSettings used by the SQL synthesis
        project: ProjectConfig instance with project directory paths
        log_level: Default logging level for the CLI

    Example:
        >>> config = Config()
        >>> config.warehouse.staging_table('RENTAL_HEADER')
        'RENTALDB.STAGING.RENTAL_HEADER'
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.warehouse = WarehouseConfig(
            account=os.getenv('SNOWFLAKE_ACCOUNT', ''),
            user=os.getenv('SNOWFLAKE_USER', ''),
            password=os.getenv('SNOWFLAKE_PASSWORD', ''),
            warehouse=os.getenv('SNOWFLAKE_WAREHOUSE', ''),
            role=os.getenv('SNOWFLAKE_ROLE', ''),
            database=os.getenv('WAREHOUSE_DATABASE', 'RENTALDB'),
            source_schema=os.getenv('SOURCE_SCHEMA', 'PROD_RENTALMAN_WSDATAIC'),
            staging_schema=os.getenv('STAGING_SCHEMA', 'STAGING'),
            config_stage=os.getenv('CONFIG_STAGE', 'RENTAL_STAGE'),
            config_file=os.getenv('CONFIG_FILE', 'config.json'),
            config_file_format=os.getenv('CONFIG_FILE_FORMAT', 'jsonconfig_format'),
            url=os.getenv('WAREHOUSE_URL') or None
        )

        self.staging = StagingSettings.from_env()

        project_root = Path(__file__).parent.parent
        self.project = ProjectConfig(
            project_root=project_root,
            logs_dir=project_root / 'logs'
        )

        self.log_level = os.getenv('LOG_LEVEL', 'INFO')

    @property
    def database(self) -> str:
        """Get warehouse database name."""
        return self.warehouse.database

    @property
    def source_schema(self) -> str:
        """Get replicated source schema name."""
        return self.warehouse.source_schema

    @property
    def staging_schema(self) -> str:
        """Get staging schema name."""
        return self.warehouse.staging_schema

    def get_connection_string(self) -> str:
        """Get warehouse connection string."""
        return self.warehouse.get_connection_string()


# Global configuration instance
config = Config()
