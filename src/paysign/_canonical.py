"""Deterministic JSON serialization for request-body digests.

Produces a canonical text form by:
- Sorting object keys recursively (code point order == UTF-8 byte order)
- No whitespace (separators=(',', ':'))
- Non-ASCII left unescaped, '/' never escaped
- NaN/Infinity, non-string keys and cycles rejected
- pydantic models dumped in JSON mode at any depth

The same string is both hashed and sent as the HTTP body.
"""

from __future__ import annotations

import json
import math
from typing import Any

from pydantic import BaseModel

from paysign.exceptions import SerializationError


def _check(obj: Any, path: str, seen: set[int]) -> None:
    """Recursively validate that obj only holds JSON-representable values."""
    if obj is None or isinstance(obj, (bool, str, int)):
        return
    if isinstance(obj, float):
        if not math.isfinite(obj):
            raise SerializationError(f"Non-finite number at {path}: {obj}")
        return
    if isinstance(obj, BaseModel):
        _check(obj.model_dump(mode="json"), path, seen)
        return
    if isinstance(obj, (dict, list, tuple)):
        if id(obj) in seen:
            raise SerializationError(f"Circular reference at {path}")
        seen.add(id(obj))
        if isinstance(obj, dict):
            for key, value in obj.items():
                if not isinstance(key, str):
                    raise SerializationError(
                        f"Object keys must be strings, got {type(key).__name__} at {path}"
                    )
                _check(value, f"{path}.{key}", seen)
        else:
            for i, item in enumerate(obj):
                _check(item, f"{path}[{i}]", seen)
        seen.discard(id(obj))
        return
    raise SerializationError(f"Unsupported type {type(obj).__name__} at {path}")


def _dump_model(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonical_json(obj: Any) -> str:
    """Produce the canonical JSON string for a JSON-representable value.

    Same input always produces the same string, and re-canonicalizing the
    parsed output reproduces it exactly.
    """
    if isinstance(obj, BaseModel):
        obj = obj.model_dump(mode="json")
    _check(obj, "$", set())
    try:
        return json.dumps(
            obj,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
            default=_dump_model,
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Body is not JSON-representable: {e}") from e
