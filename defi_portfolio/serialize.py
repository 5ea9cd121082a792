"""JSON-ready conversion of model objects."""
from __future__ import annotations

import dataclasses
from typing import Any, Mapping

# Integers outside this range lose precision in JSON consumers using doubles.
MAX_SAFE_INTEGER = 2**53 - 1

# Base-unit amounts are always emitted as strings.
_AMOUNT_FIELDS = frozenset({"balance"})


def _derived_properties(obj: Any) -> dict[str, Any]:
    props: dict[str, Any] = {}
    for cls in reversed(type(obj).__mro__):
        for name, attr in vars(cls).items():
            if isinstance(attr, property) and not name.startswith("_"):
                props[name] = getattr(obj, name)
    return props


def _convert_int(value: int) -> int | str:
    return str(value) if abs(value) > MAX_SAFE_INTEGER else value


def to_jsonable(obj: Any) -> Any:
    """Recursively convert dataclasses, mappings and sequences to JSON types.

    Dataclasses include their public read-only properties (``value_usd``,
    ``total_value_usd`` ...) next to their fields. Mapping keys become
    strings; tuples become lists.
    """
    if obj is None or isinstance(obj, (bool, str, float)):
        return obj
    if isinstance(obj, int):
        return _convert_int(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        out: dict[str, Any] = {}
        for f in dataclasses.fields(obj):
            value = getattr(obj, f.name)
            if f.name in _AMOUNT_FIELDS and isinstance(value, int):
                out[f.name] = str(value)
            else:
                out[f.name] = to_jsonable(value)
        for name, value in _derived_properties(obj).items():
            out[name] = to_jsonable(value)
        return out
    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(item) for item in obj]
    return str(obj)
