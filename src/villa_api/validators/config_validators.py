"""
Before-validators for values read from the environment.

Both helpers strip surrounding whitespace (a common .env artefact) and pass
None or non-string values through untouched, so the field's own type
validation still reports them.
"""
from typing import Any, Callable


def _normalize(value: Any, transform: Callable[[str], str]) -> Any:
    if not isinstance(value, str):
        return value
    return transform(value.strip())


def normalize_upper(value: Any) -> Any:
    """`" debug "` -> `"DEBUG"`."""
    return _normalize(value, str.upper)


def normalize_lower(value: Any) -> Any:
    """`"JSON"` -> `"json"`."""
    return _normalize(value, str.lower)
