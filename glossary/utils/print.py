"""Printing utilities."""
import pprint
from typing import Any
from pydantic import BaseModel


def truncate_nested(obj: Any, max_len: int = 50) -> Any:
    """Recursively truncate long strings in nested dicts/lists/models."""
    if isinstance(obj, BaseModel):
        return truncate_nested(obj.model_dump(), max_len)
    elif isinstance(obj, dict):
        return {k: truncate_nested(v, max_len) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [truncate_nested(v, max_len) for v in obj]
    elif isinstance(obj, str) and len(obj) > max_len:
        return obj[:max_len] + "..."
    return obj


def safe_pretty_print(obj: Any, max_len: int = 50) -> str:
    """Format any object with long strings truncated, for error messages."""
    return pprint.pformat(truncate_nested(obj, max_len=max_len), indent=2, width=120)
