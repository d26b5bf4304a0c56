"""
==========================================
Source type to warehouse cast expressions.
==========================================

Maps each column's source type descriptor (as exported by the replication
configuration) to a warehouse-compatible CAST. Rules are evaluated per
column, first match wins:

    DECIMAL            CAST(col AS NUMBER(length,scale)) AS col
    CHAR               CAST(TRIM(col) AS VARCHAR(length)) AS col
    passthrough token  col
    DATE/BOOLEAN/TIMESTAMP  CAST(col AS <mapped>) AS col
    anything else      CAST(col AS <mapped or original>(length)) AS col

CHAR values are trimmed because the source system pads them to their
fixed width.

Usage:
    from sql.type_cast import TypeCastBuilder

    builder = TypeCastBuilder()
    cast_sql = builder.build_cast_sql('RAOHDR', column_map)
"""

import logging
from typing import Dict, Iterable, List, Optional

from core.exceptions import QueryBuildError
from models.staging_models import ColumnMap, ColumnTypeSpec, SelectItem

logger = logging.getLogger(__name__)

UNPARAMETERIZED_TYPES = ('DATE', 'BOOLEAN', 'TIMESTAMP')


class TypeCastBuilder:
    """
    Builds CAST expressions from column type descriptors.

    Attributes:
        type_map: Source type token -> warehouse type (upper-case keys)
        passthrough_types: Tokens whose columns are emitted without a cast

    Example:
        >>> builder = TypeCastBuilder()
        >>> builder.build_cast_sql('T', {'AMT': ColumnTypeSpec('DECIMAL', 10, 2)})
        'CAST(AMT AS NUMBER(10,2)) AS AMT'
    """

    def __init__(
        self,
        type_map: Optional[Dict[str, str]] = None,
        passthrough_types: Optional[Iterable[str]] = None
    ):
        if type_map is None or passthrough_types is None:
            from core.config import config
            type_map = config.staging.type_map if type_map is None else type_map
            if passthrough_types is None:
                passthrough_types = config.staging.passthrough_types

        self.type_map = {key.upper(): value for key, value in type_map.items()}
        self.passthrough_types = frozenset(token.upper() for token in passthrough_types)

    def target_type(self, source_type: str) -> str:
        """Mapped warehouse type, or the source token itself when unmapped."""
        return self.type_map.get(source_type.upper(), source_type)

    def build_select_item(self, table_name: str, column: str, spec: ColumnTypeSpec) -> SelectItem:
        """
        Build the SELECT item for one column.

        Args:
            table_name: Owning table, used for error context
            column: Raw column name
            spec: Column type descriptor

        Returns:
            SelectItem with the cast expression and the column as alias

        Raises:
            QueryBuildError: If the type is missing or a required
                length/scale is absent
        """
        if not spec.type:
            raise QueryBuildError(
                f"Column '{column}' of table '{table_name}' has no 'type' in its configuration",
                table=table_name
            )

        if not isinstance(spec.type, str):
            raise QueryBuildError(
                f"Column '{column}' of table '{table_name}' has a non-text type {spec.type!r}",
                table=table_name
            )

        source_type = spec.type.upper()
        target = self.target_type(spec.type)

        if source_type == 'DECIMAL':
            if spec.length is None or spec.numeric_scale is None:
                raise QueryBuildError(
                    f"DECIMAL column '{column}' of table '{table_name}' needs 'length' and 'numeric_scale'",
                    table=table_name
                )
            return SelectItem(f"CAST({column} AS {target}({spec.length},{spec.numeric_scale}))", column)

        if source_type == 'CHAR':
            if spec.length is None:
                raise QueryBuildError(
                    f"CHAR column '{column}' of table '{table_name}' needs 'length'",
                    table=table_name
                )
            return SelectItem(f"CAST(TRIM({column}) AS {target}({spec.length}))", column)

        if source_type in self.passthrough_types:
            # TODO: confirm with the replication owners whether TIMESTMP is a deliberate bypass or a typo of TIMESTAMP
            logger.debug(f"Column {table_name}.{column} typed {spec.type} is passed through without a cast")
            return SelectItem(column)

        if source_type in UNPARAMETERIZED_TYPES:
            return SelectItem(f"CAST({column} AS {target})", column)

        if spec.length is None:
            return SelectItem(f"CAST({column} AS {target})", column)
        return SelectItem(f"CAST({column} AS {target}({spec.length}))", column)

    def build_select_items(self, table_name: str, column_map: ColumnMap) -> List[SelectItem]:
        """Build SELECT items for every column, in column map order."""
        return [
            self.build_select_item(table_name, column, spec)
            for column, spec in column_map.items()
        ]

    def build_cast_sql(self, table_name: str, column_map: ColumnMap) -> str:
        """
        Build the comma-joined cast list of a table.

        Args:
            table_name: Table name for error context
            column_map: Column name -> type descriptor

        Returns:
            Comma-joined `CAST(...) AS col` expressions
        """
        return ', '.join(item.render() for item in self.build_select_items(table_name, column_map))
