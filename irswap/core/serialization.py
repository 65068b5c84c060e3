"""Canonical serialization and content-addressed hashing.

canonical_bytes(obj): deterministic JSON bytes (sorted keys, no whitespace).
content_hash(obj): SHA-256 hex of canonical bytes. Trade fingerprints,
oracle request ids and event keys are all content hashes.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from decimal import Decimal
from enum import Enum
from typing import Any

from irswap.core.result import Err, Ok
from irswap.core.types import Address


def _to_serializable(obj: object) -> Any:  # noqa: PLR0911
    """Recursively convert a domain object to a JSON-compatible Python value."""
    if obj is None:
        return None
    # bool before int (bool is subclass of int)
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, int):
        return obj
    if isinstance(obj, str):
        return obj
    if isinstance(obj, Address):
        return obj.value
    if isinstance(obj, bytes):
        return obj.hex()
    if isinstance(obj, Decimal):
        if not obj.is_finite():
            msg = f"Cannot serialize non-finite Decimal {obj}"
            raise TypeError(msg)
        if obj == 0:
            return "0"
        return str(obj.normalize())
    if isinstance(obj, Enum):
        return obj.name
    if isinstance(obj, (tuple, list)):
        return [_to_serializable(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _to_serializable(v) for k, v in sorted(obj.items())}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        result: dict[str, Any] = {"_type": type(obj).__name__}
        for f in dataclasses.fields(obj):
            result[f.name] = _to_serializable(getattr(obj, f.name))
        return result
    msg = f"Cannot serialize {type(obj).__name__}"
    raise TypeError(msg)


def canonical_bytes(obj: object) -> Ok[bytes] | Err[str]:
    """Convert a domain value to canonical JSON bytes.

    Returns Err on unsupported types instead of raising. Type names are part
    of the encoding, so two dataclasses with equal fields never collide.
    """
    try:
        serializable = _to_serializable(obj)
    except TypeError as e:
        return Err(f"Unsupported type in canonical serialization: {e}")
    return Ok(
        json.dumps(serializable, sort_keys=True, separators=(",", ":")).encode("utf-8")
    )


def content_hash(obj: object) -> Ok[str] | Err[str]:
    """SHA-256 hex digest of canonical_bytes(obj)."""
    match canonical_bytes(obj):
        case Err() as e:
            return e
        case Ok(b):
            return Ok(hashlib.sha256(b).hexdigest())
