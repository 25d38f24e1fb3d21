"""
Parameterized SELECT builder for observation tables.
"""

import re
from typing import Any, Dict, List, Optional, Tuple
import pandas as pd

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_DOTTED_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*(\.[A-Za-z_][A-Za-z0-9_]*){1,2}$")


def validate_identifier(name: str, kind: str = "identifier", allow_dotted: bool = False) -> str:
    """
    Validate a table or column name before it is interpolated into SQL.

    Args:
        name: The identifier
        kind: What it names, used in the error message
        allow_dotted: Accept 'dataset.table' / 'project.dataset.table'

    Raises:
        ValueError: If the identifier contains anything beyond letters,
            digits and underscores (plus dots when allowed)
    """
    if not name or not isinstance(name, str):
        raise ValueError(f"{kind} cannot be empty")

    if _IDENTIFIER.match(name):
        return name
    if allow_dotted and _DOTTED_IDENTIFIER.match(name):
        return name

    raise ValueError(
        f"Invalid {kind}: '{name}'. "
        "Only alphanumeric characters and underscores are allowed."
    )


def build_observation_query(
    table: str,
    columns: Optional[List[str]] = None,
    entity_column: str = "entity_id",
    timestamp_column: str = "timestamp",
    entity_id: Any = None,
    start: Any = None,
    end: Any = None,
    placeholder: str = ":{}",
    quote: str = "",
    allow_dotted: bool = False,
) -> Tuple[str, Dict[str, Any]]:
    """
    Build a SELECT over an observation table filtered by entity and an
    inclusive time range, ordered by timestamp.

    Args:
        table: Table name
        columns: Columns to select (default: all); must include timestamp_column
        entity_column: Entity id column used for the entity filter
        timestamp_column: Timestamp column used for the range filter and ordering
        entity_id: Keep only this entity (optional)
        start: Keep rows with timestamp >= start (optional)
        end: Keep rows with timestamp <= end (optional)
        placeholder: Format for a named parameter, ':{}' for SQLite or '@{}'
            for BigQuery
        quote: Quote character placed around the table name ('`' for BigQuery)
        allow_dotted: Accept dotted table names

    Returns:
        tuple: (query, params) where params maps parameter names to values
    """
    validate_identifier(table, "table name", allow_dotted=allow_dotted)
    validate_identifier(entity_column, "entity_column")
    validate_identifier(timestamp_column, "timestamp_column")

    if start is not None and end is not None and pd.Timestamp(start) > pd.Timestamp(end):
        raise ValueError(f"start ({start}) must not be after end ({end})")

    if columns:
        select = ", ".join(validate_identifier(col, "column name") for col in columns)
    else:
        select = "*"

    if columns and timestamp_column not in columns:
        raise ValueError(
            f"columns must include the timestamp column '{timestamp_column}', "
            f"got {columns}"
        )

    conditions = []
    params: Dict[str, Any] = {}

    if entity_id is not None:
        conditions.append(f"{entity_column} = {placeholder.format('entity_id')}")
        params["entity_id"] = entity_id

    if start is not None:
        conditions.append(f"{timestamp_column} >= {placeholder.format('start')}")
        params["start"] = start

    if end is not None:
        conditions.append(f"{timestamp_column} <= {placeholder.format('end')}")
        params["end"] = end

    query = f"SELECT {select} FROM {quote}{table}{quote}"
    if conditions:
        query += " WHERE " + " AND ".join(conditions)
    query += f" ORDER BY {timestamp_column}"

    return query, params
