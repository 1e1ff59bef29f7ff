"""
camelCase serialisation for API responses.
Uses Pydantic's alias_generators so response keys match the request schema aliases.
"""
from datetime import datetime
from typing import Any, Iterable, Optional

from pydantic.alias_generators import to_camel
from sqlalchemy import inspect


def to_camel_key(s: str) -> str:
    return to_camel(s)


def dict_keys_to_camel(obj: Any) -> Any:
    """Recursively convert dict keys from snake_case to camelCase."""
    if isinstance(obj, dict):
        return {to_camel_key(k): dict_keys_to_camel(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [dict_keys_to_camel(x) for x in obj]
    return obj


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def row_to_camel(obj: Any, exclude: Iterable[str] = ()) -> dict[str, Any]:
    """
    Serialize an ORM row's column attributes to a camelCase dict.
    Datetimes become ISO strings; relationships are not followed.
    """
    skip = set(exclude)
    out: dict[str, Any] = {}
    for attr in inspect(obj).mapper.column_attrs:
        if attr.key in skip:
            continue
        value = getattr(obj, attr.key)
        if isinstance(value, datetime):
            value = value.isoformat()
        out[to_camel_key(attr.key)] = value
    return out
