"""
=============================================
Data Definition Language (DDL) utilities.
=============================================

Generates the statement used by the FULL load: every staging table is
re-materialized from its synthesized source query.

Functions:
    create_table_as_select: Generate CREATE [OR REPLACE] TABLE ... AS SELECT

Example:
    >>> from sql.ddl import create_table_as_select
    >>>
    >>> sql = create_table_as_select(
    ...     target_table='RENTALDB.STAGING.RENTAL_HEADER',
    ...     query='SELECT CAST(ORDER_NO AS NUMBER(9)) AS ORDER_NO FROM RENTALDB.SRC.RAOHDR'
    ... )
    >>> print(sql)
    CREATE OR REPLACE TABLE RENTALDB.STAGING.RENTAL_HEADER AS SELECT ...;
"""


def create_table_as_select(
    target_table: str,
    query: str,
    replace: bool = True
) -> str:
    """Generate a CREATE TABLE AS SELECT statement.

    Args:
        target_table: Fully-qualified table to create
        query: SELECT text without a trailing semicolon
        replace: If True, use CREATE OR REPLACE so reruns rebuild the table

    Returns:
        SQL CTAS statement
    """
    create_keyword = "CREATE OR REPLACE TABLE" if replace else "CREATE TABLE"
    return f"{create_keyword} {target_table} AS {query};"
