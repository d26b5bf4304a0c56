"""
===========================================
Configuration document loading and parsing.
===========================================

The list of replicated tables and their column type descriptors lives in
a JSON document stored in a warehouse stage:

    {
      "tables": [
        {"original_name": "RAOHDR", "full_form_name": "RENTAL_HEADER",
         "primary_keys": ["ORDER_NO"]}
      ],
      "RAOHDR": {
        "ORDER_NO": {"type": "DECIMAL", "length": 9, "numeric_scale": 0},
        "_FIVETRAN_DELETED": {"type": "BOOLEAN"},
        "_FIVETRAN_SYNCED": {"type": "TIMESTAMP"}
      }
    }

The document is read once per run and turned into immutable models.

Example:
    >>> from utils.config_loader import load_config_document, parse_config_document
    >>>
    >>> raw = load_config_document(path='config.json')
    >>> document = parse_config_document(raw)
    >>> [t.original_name for t in document.tables]
    ['RAOHDR']
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from core.config import config
from core.exceptions import ConfigError
from core.logger import get_logger
from models.staging_models import ColumnTypeSpec, ConfigDocument, TableConfig

logger = get_logger(__name__)

REQUIRED_TABLE_KEYS = ('original_name', 'full_form_name')

# descriptor field -> accepted JSON type, when present
DESCRIPTOR_FIELDS = (('type', str), ('length', int), ('numeric_scale', int))


def _check_primary_keys(entry: Dict[str, Any], index: int) -> None:
    keys = entry.get('primary_keys')
    if keys is None:
        return
    if not isinstance(keys, list) or not all(isinstance(key, str) for key in keys):
        raise ConfigError(
            f"primary_keys of table definition #{index} must be a list of column names, got {keys!r}",
            table=entry.get('original_name')
        )


def _check_descriptor(table_name: str, column: str, props: Dict[str, Any]) -> None:
    for name, expected in DESCRIPTOR_FIELDS:
        value = props.get(name)
        # bool is an int subclass
        if value is not None and (not isinstance(value, expected) or isinstance(value, bool)):
            raise ConfigError(
                f"'{name}' of column '{column}' in {table_name} must be {expected.__name__}, got {value!r}",
                table=table_name
            )


def stage_config_query(warehouse=None) -> str:
    """
    SQL reading the configuration document from its stage.

    Args:
        warehouse: WarehouseConfig (defaults to config.warehouse)

    Returns:
        SELECT over the staged JSON file
    """
    warehouse = warehouse or config.warehouse
    return (
        f"SELECT $1 FROM {warehouse.config_stage_path()} "
        f"(FILE_FORMAT => {warehouse.config_file_format})"
    )


def load_config_document(
    executor=None,
    path: Optional[Union[str, Path]] = None,
    warehouse=None
) -> Dict[str, Any]:
    """
    Read the raw configuration document.

    Args:
        executor: Executor used to read the stage when no path is given
        path: Local JSON file to read instead of the stage
        warehouse: WarehouseConfig locating the stage

    Returns:
        Decoded JSON document

    Raises:
        ConfigError: If the document cannot be read or decoded
    """
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")
        logger.info(f"📖 Reading configuration from {config_path}")
        raw_json = config_path.read_text(encoding='utf-8')
    else:
        if executor is None:
            raise ConfigError("No executor available to read the configuration stage")
        query = stage_config_query(warehouse)
        logger.info(f"📖 Reading configuration from stage: {query}")
        rows = executor.execute(query)
        if not rows or not rows[0]:
            raise ConfigError("Configuration stage returned no rows")
        raw_json = rows[0][0]

    if isinstance(raw_json, dict):
        return raw_json

    try:
        document = json.loads(raw_json)
    except (TypeError, json.JSONDecodeError) as e:
        raise ConfigError(f"Configuration document is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise ConfigError("Configuration document must be a JSON object")
    return document


def parse_config_document(raw: Dict[str, Any]) -> ConfigDocument:
    """
    Convert a raw configuration document into models.

    Tables without a column map are kept; the orchestrator skips them.
    A column without a 'type' is kept too and fails at query build time.

    Args:
        raw: Decoded configuration document

    Returns:
        ConfigDocument with tables in document order

    Raises:
        ConfigError: If 'tables' is missing or malformed, primary_keys is not a
            list of names, a type descriptor field has the wrong JSON type,
            or a primary key is absent from its table's column map
    """
    tables_raw = raw.get('tables')
    if tables_raw is None:
        raise ConfigError("Configuration document has no 'tables' entry")
    if not isinstance(tables_raw, list):
        raise ConfigError("'tables' must be a list of table definitions")

    tables = []
    column_maps = {}

    for index, entry in enumerate(tables_raw):
        if not isinstance(entry, dict):
            raise ConfigError(f"Table definition #{index} is not an object")
        missing = [key for key in REQUIRED_TABLE_KEYS if not entry.get(key)]
        if missing:
            raise ConfigError(f"Table definition #{index} is missing {', '.join(missing)}")

        _check_primary_keys(entry, index)
        table = TableConfig.from_dict(entry)
        tables.append(table)

        columns_raw = raw.get(table.original_name)
        if not columns_raw:
            continue
        if not isinstance(columns_raw, dict):
            raise ConfigError(f"Column map of {table.original_name} must be an object", table=table.original_name)

        column_map = {}
        for column, props in columns_raw.items():
            if not isinstance(props, dict):
                raise ConfigError(
                    f"Column '{column}' of {table.original_name} must be an object",
                    table=table.original_name
                )
            _check_descriptor(table.original_name, column, props)
            column_map[column] = ColumnTypeSpec.from_dict(props)

        unknown_keys = [pk for pk in table.primary_keys if pk not in column_map]
        if unknown_keys:
            raise ConfigError(
                f"Primary keys {', '.join(unknown_keys)} of {table.original_name} are not in its column map",
                table=table.original_name
            )

        column_maps[table.original_name] = column_map

    logger.info(f"✅ Loaded configuration for {len(tables)} tables")
    return ConfigDocument(tables=tuple(tables), column_maps=column_maps)
