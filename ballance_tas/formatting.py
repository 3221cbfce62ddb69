"""Brace-style message formatting for script values."""

from __future__ import annotations

import functools
import inspect
import string
import types
from typing import Any


def _shortest_number(value: float) -> str:
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text


def _has_custom_str(value: Any) -> bool:
    return type(value).__str__ is not object.__str__


def _render_custom(value: Any, fallback: str) -> str:
    try:
        text = str(value)
    except Exception:
        return fallback
    return text if isinstance(text, str) else fallback


def describe_value(value: Any) -> str:
    """Return the text a script value is shown as."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _shortest_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (types.GeneratorType, types.CoroutineType, types.AsyncGeneratorType)):
        return "<thread>"
    if inspect.isroutine(value) or isinstance(value, functools.partial):
        return "<<function>"
    if isinstance(value, (dict, list, tuple, set, frozenset)):
        if _has_custom_str(value):
            return _render_custom(value, "<table>")
        return "<table>"
    if _has_custom_str(value):
        return _render_custom(value, "<userdata>")
    return "<userdata>"


class _Number(float):
    """A float that renders in shortest form under an empty format spec."""

    def __format__(self, spec: str) -> str:
        if not spec:
            return _shortest_number(self)
        return float.__format__(self, spec)


def _to_argument(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _Number(value)
    return describe_value(value)


def _check_fields(fmt: str) -> None:
    for _, field, spec, _ in string.Formatter().parse(fmt):
        if field is None:
            continue
        if field and not field.isdigit():
            raise ValueError("argument not found")
        if spec and "{" in spec:
            _check_fields(spec)


def format_string(fmt: str, *args: Any) -> str:
    """Format ``fmt`` with positional ``{}`` fields; failures are reported in the text."""
    if not fmt or "{" not in fmt:
        return fmt

    arguments = [_to_argument(arg) for arg in args]
    try:
        _check_fields(fmt)
        return fmt.format(*arguments)
    except (ValueError, IndexError, KeyError) as exc:
        message = exc.args[0] if exc.args else str(exc)
        return f"[Format Error: {message}] {fmt}"
    except Exception as exc:
        return f"[Exception: {exc}] {fmt}"