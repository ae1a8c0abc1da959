"""
Common helpers for JSON columns
"""
from typing import Any, Dict, List, Union
import json


def handle_postgresql_json(value: Any) -> Union[Dict, List, None]:
    """
    Normalize a JSON column value.

    asyncpg returns JSONB columns as dicts/lists, while SQLite and the
    in-memory store may hand back serialized strings.

    Args:
        value: The stored value (dict, list, str, or None)

    Returns:
        Parsed JSON value (dict, list) or None
    """
    if value is None:
        return value

    if isinstance(value, (dict, list)):
        return value

    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return value
