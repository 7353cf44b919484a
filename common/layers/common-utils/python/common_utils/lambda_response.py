"""Utilities for building Lambda-style HTTP responses."""

from dataclasses import asdict, is_dataclass
from typing import Any, Dict

__all__ = ["lambda_response", "to_jsonable"]


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses (recursively) into plain JSON-friendly structures."""
    if is_dataclass(value) and not isinstance(value, type):
        return {k: to_jsonable(v) for k, v in asdict(value).items()}
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def lambda_response(status: int, body: Any) -> Dict[str, Any]:
    """Return a standard Lambda response dictionary."""
    return {"statusCode": status, "body": to_jsonable(body)}
