"""
======================================
Column alias normalization utilities.
======================================

Identifiers that begin or end with an underscore are discouraged in the
staging warehouse, yet CDC connectors add exactly such columns
(`_FIVETRAN_DELETED`, `_FIVETRAN_SYNCED`). Every alias written into a
staging table is therefore rewritten:

    _FIVETRAN_SYNCED  ->  val_FIVETRAN_SYNCED
    NAME_             ->  NAME_val
    _BOTH_            ->  val_BOTH_val
    PLAIN             ->  PLAIN

Functions:
- normalize_identifier: Rewrite one bare column name
- sanitize_select_items: Rewrite the aliases of a structured SELECT list
- sanitize_aliases: Rewrite every `AS <alias>` pair in rendered SQL text

All three share normalize_identifier, so a primary key referenced by name
in MERGE conditions always matches the column actually present in staging.
"""

from typing import Iterable, List

from models.staging_models import SelectItem

LEADING_MARKER = 'val_'
TRAILING_MARKER = '_val'


def normalize_identifier(name: str) -> str:
    """
    Replace leading/trailing underscore runs of a column name.

    Args:
        name: Raw column name

    Returns:
        Name prefixed with 'val_' when it started with underscores and
        suffixed with '_val' when it ended with them

    Example:
        >>> normalize_identifier('_FIVETRAN_DELETED')
        'val_FIVETRAN_DELETED'
    """
    core = name.strip('_')
    if core == name:
        return name

    leading = len(name) - len(name.lstrip('_'))
    trailing = len(name) - len(name.rstrip('_'))

    normalized = core
    if leading > 0:
        normalized = LEADING_MARKER + normalized
    if trailing > 0:
        normalized = normalized + TRAILING_MARKER
    return normalized


def normalize_identifiers(names: Iterable[str]) -> List[str]:
    """Normalize a sequence of column names, preserving order."""
    return [normalize_identifier(name) for name in names]


def sanitize_select_items(items: Iterable[SelectItem]) -> List[SelectItem]:
    """
    Normalize the alias of every SELECT item.

    Items without an alias are emitted bare and left untouched.

    Args:
        items: Structured SELECT list

    Returns:
        New list with normalized aliases
    """
    return [
        item if item.alias is None else SelectItem(item.expression, normalize_identifier(item.alias))
        for item in items
    ]


def sanitize_aliases(sql: str) -> str:
    """
    Rewrite every `AS <alias>` pair in SQL text.

    The text is split on whitespace and re-joined with single spaces, so
    original formatting is not preserved. A token following `AS` (any case)
    is treated as an alias; a trailing comma is kept. The alias token is
    never re-examined as a potential `AS`.

    Args:
        sql: SQL text produced by the query synthesizer

    Returns:
        Whitespace-normalized SQL with sanitized aliases

    Example:
        >>> sanitize_aliases('SELECT CAST(X AS NUMBER(5)) AS _X_, Y AS Y')
        'SELECT CAST(X AS NUMBER(5)) AS val_X_val, Y AS Y'
    """
    tokens = sql.split()
    result_tokens = []
    i = 0

    while i < len(tokens):
        token = tokens[i]
        if token.upper() == 'AS' and i + 1 < len(tokens):
            alias = tokens[i + 1]
            trailing_comma = ''
            if alias.endswith(','):
                alias = alias[:-1]
                trailing_comma = ','

            result_tokens.append(token)
            result_tokens.append(normalize_identifier(alias) + trailing_comma)
            i += 2
        else:
            result_tokens.append(token)
            i += 1

    return ' '.join(result_tokens)
