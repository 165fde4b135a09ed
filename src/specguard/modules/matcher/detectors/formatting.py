"""Discrepancy message formatting shared by the detectors."""

from enum import Enum
from typing import Any


def mismatch(where: str, field: str, expected: Any, actual: Any) -> str:
    """Message for a field whose values differ."""
    return f"{where}: {field} mismatch - expected {render(expected)}, actual {render(actual)}"


def missing(where: str, what: str) -> str:
    """Message for an element of the expected document absent from the actual one."""
    return f"{where}: missing {what}"


def unexpected(where: str, what: str) -> str:
    """Message for an element of the actual document absent from the expected one."""
    return f"{where}: unexpected {what}"


def render(value: Any) -> str:
    """Render a value for a discrepancy message."""
    if value is None:
        return "none"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, Enum):
        return f"'{value.value}'"
    if isinstance(value, str):
        return f"'{value}'"
    if isinstance(value, (set, frozenset, list, tuple)):
        return "[" + ", ".join(sorted(str(item) for item in value)) + "]"
    return str(value)
