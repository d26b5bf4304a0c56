"""
==================================================
Comprehensive pytest suite for sql/type_cast.py
==================================================

Tests for TypeCastBuilder: mapping source type descriptors to casts.

Sections:
---------
1. Unit tests - One rule per test
2. Edge case tests - Missing fields, unmapped and passthrough types
3. Integration tests - Cast lists over whole column maps

How to Execute:
---------------
All tests:          pytest tests/tests_sql/test_type_cast.py -v
By category:        pytest tests/tests_sql/test_type_cast.py -m unit
"""

import pytest

from core.config import DEFAULT_TYPE_MAP
from core.exceptions import QueryBuildError
from models.staging_models import ColumnTypeSpec, SelectItem
from sql.type_cast import TypeCastBuilder


@pytest.fixture
def builder():
    return TypeCastBuilder(type_map=DEFAULT_TYPE_MAP, passthrough_types=('TIMESTMP',))


# =============================================================================
# SECTION 1: UNIT TESTS
# =============================================================================

@pytest.mark.unit
def test_decimal_cast_uses_length_and_scale(builder):
    """DECIMAL renders NUMBER(length,scale)."""
    sql = builder.build_cast_sql('T', {'AMT': ColumnTypeSpec('DECIMAL', 10, 2)})

    assert sql == 'CAST(AMT AS NUMBER(10,2)) AS AMT'


@pytest.mark.unit
def test_char_cast_trims_padding(builder):
    """CHAR is trimmed before the VARCHAR cast."""
    sql = builder.build_cast_sql('T', {'CODE': ColumnTypeSpec('CHAR', 5)})

    assert sql == 'CAST(TRIM(CODE) AS VARCHAR(5)) AS CODE'


@pytest.mark.unit
def test_boolean_cast_has_no_precision(builder):
    sql = builder.build_cast_sql('T', {'ACTIVE': ColumnTypeSpec('BOOLEAN')})

    assert sql == 'CAST(ACTIVE AS BOOLEAN) AS ACTIVE'


@pytest.mark.unit
def test_timestamp_maps_to_timezone_aware_type(builder):
    sql = builder.build_cast_sql('T', {'UPDATED': ColumnTypeSpec('TIMESTAMP', 26)})

    assert sql == 'CAST(UPDATED AS TIMESTAMP_TZ) AS UPDATED'


@pytest.mark.unit
def test_date_cast(builder):
    sql = builder.build_cast_sql('T', {'D': ColumnTypeSpec('DATE', 10)})

    assert sql == 'CAST(D AS DATE) AS D'


@pytest.mark.unit
def test_bigint_uses_default_rule_with_length(builder):
    sql = builder.build_cast_sql('T', {'ID': ColumnTypeSpec('BIGINT', 18)})

    assert sql == 'CAST(ID AS NUMBER(18)) AS ID'


@pytest.mark.unit
def test_type_tokens_are_case_insensitive(builder):
    sql = builder.build_cast_sql('T', {'AMT': ColumnTypeSpec('decimal', 7, 3)})

    assert sql == 'CAST(AMT AS NUMBER(7,3)) AS AMT'


@pytest.mark.unit
def test_select_item_carries_column_as_alias(builder):
    item = builder.build_select_item('T', 'QTY', ColumnTypeSpec('NUMERIC', 7))

    assert item == SelectItem('CAST(QTY AS NUMBER(7))', 'QTY')


# =============================================================================
# SECTION 2: EDGE CASE TESTS
# =============================================================================

@pytest.mark.edge_case
def test_unmapped_type_passes_token_through_default_rule(builder):
    """Unknown types do not fail; the source token is used as target type."""
    sql = builder.build_cast_sql('T', {'NOTE': ColumnTypeSpec('GRAPHIC', 12)})

    assert sql == 'CAST(NOTE AS GRAPHIC(12)) AS NOTE'


@pytest.mark.edge_case
def test_passthrough_token_emits_bare_column(builder):
    """The legacy TIMESTMP token bypasses casting entirely."""
    item = builder.build_select_item('T', 'LOADED_AT', ColumnTypeSpec('TIMESTMP', 26))

    assert item.render() == 'LOADED_AT'
    assert item.alias is None


@pytest.mark.edge_case
def test_default_rule_without_length_has_no_precision(builder):
    sql = builder.build_cast_sql('T', {'ID': ColumnTypeSpec('BIGINT')})

    assert sql == 'CAST(ID AS NUMBER) AS ID'


@pytest.mark.edge_case
def test_missing_type_raises_query_build_error(builder):
    with pytest.raises(QueryBuildError) as exc_info:
        builder.build_cast_sql('RAOHDR', {'ORDER_NO': ColumnTypeSpec(None, 9)})

    assert "ORDER_NO" in str(exc_info.value)
    assert exc_info.value.table == 'RAOHDR'


@pytest.mark.edge_case
def test_decimal_without_scale_raises(builder):
    with pytest.raises(QueryBuildError):
        builder.build_cast_sql('T', {'AMT': ColumnTypeSpec('DECIMAL', 10)})


@pytest.mark.edge_case
def test_char_without_length_raises(builder):
    with pytest.raises(QueryBuildError):
        builder.build_cast_sql('T', {'CODE': ColumnTypeSpec('CHAR')})


@pytest.mark.edge_case
def test_non_text_type_raises(builder):
    with pytest.raises(QueryBuildError, match='non-text type 123'):
        builder.build_cast_sql('T', {'CODE': ColumnTypeSpec(123)})


@pytest.mark.edge_case
def test_injected_type_map_overrides_defaults():
    """A different dialect mapping needs no code change."""
    builder = TypeCastBuilder(
        type_map={'CHAR': 'STRING', 'TIMESTAMP': 'TIMESTAMP_NTZ'},
        passthrough_types=()
    )

    assert builder.build_cast_sql('T', {'C': ColumnTypeSpec('CHAR', 3)}) == 'CAST(TRIM(C) AS STRING(3)) AS C'
    assert builder.build_cast_sql('T', {'TS': ColumnTypeSpec('TIMESTAMP')}) == 'CAST(TS AS TIMESTAMP_NTZ) AS TS'
    assert builder.build_cast_sql('T', {'X': ColumnTypeSpec('TIMESTMP', 26)}) == 'CAST(X AS TIMESTMP(26)) AS X'


# =============================================================================
# SECTION 3: INTEGRATION TESTS
# =============================================================================

@pytest.mark.integration
def test_cast_list_follows_column_map_order(builder):
    column_map = {
        'B': ColumnTypeSpec('BOOLEAN'),
        'A': ColumnTypeSpec('CHAR', 2),
        '_FIVETRAN_SYNCED': ColumnTypeSpec('TIMESTAMP'),
    }

    sql = builder.build_cast_sql('T', column_map)

    assert sql == (
        'CAST(B AS BOOLEAN) AS B, '
        'CAST(TRIM(A) AS VARCHAR(2)) AS A, '
        'CAST(_FIVETRAN_SYNCED AS TIMESTAMP_TZ) AS _FIVETRAN_SYNCED'
    )


@pytest.mark.integration
def test_builder_defaults_to_configured_settings():
    builder = TypeCastBuilder()

    assert builder.target_type('CHAR') == 'VARCHAR'
    assert 'TIMESTMP' in builder.passthrough_types
