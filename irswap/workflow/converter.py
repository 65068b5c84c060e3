"""Temporal DataConverter for the trade confirmation payloads.

Addresses and NonEmptyStr travel as bare strings and are rebuilt from the
field's type hint, so a payload reads the same as the engine's events.
Workflow dataclasses carry a __type__ tag. Enums travel as their value,
tuples as lists.
"""

from __future__ import annotations

import dataclasses
import importlib
import json
from enum import Enum
from typing import Any, get_type_hints

from temporalio.converter import (
    CompositePayloadConverter,
    DataConverter,
    DefaultPayloadConverter,
    JSONPlainPayloadConverter,
    JSONTypeConverter,
)

from irswap.core.types import Address, NonEmptyStr

# Value wrappers encoded as their single string field.
_SCALARS: tuple[type, ...] = (Address, NonEmptyStr)

# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _to_json(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, _SCALARS):
        return obj.value
    if isinstance(obj, Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        tagged: dict[str, Any] = {
            "__type__": f"{type(obj).__module__}.{type(obj).__qualname__}",
        }
        tagged.update(
            (f.name, _to_json(getattr(obj, f.name))) for f in dataclasses.fields(obj)
        )
        return tagged
    if isinstance(obj, (tuple, list)):
        return [_to_json(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _to_json(v) for k, v in obj.items()}
    raise TypeError(f"Cannot encode {type(obj).__name__} in a workflow payload")


class IrswapJSONEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:
        return _to_json(o)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

# Only workflow I/O classes are ever instantiated from a tag.
_ALLOWED_MODULES: frozenset[str] = frozenset({"irswap.workflow.types"})

_CLASS_CACHE: dict[str, type] = {}


def _resolve_class(fqn: str) -> type | None:
    if fqn in _CLASS_CACHE:
        return _CLASS_CACHE[fqn]
    module_name, _, class_name = fqn.rpartition(".")
    if module_name not in _ALLOWED_MODULES:
        return None
    cls = getattr(importlib.import_module(module_name), class_name, None)
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        return None
    _CLASS_CACHE[fqn] = cls
    return cls


def _from_json(hint: Any, value: Any) -> Any:
    """Rebuild irswap values from decoded JSON, guided by `hint`."""
    if value is None:
        return None
    if hint in _SCALARS and isinstance(value, str):
        return hint(value=value)
    if isinstance(value, dict) and "__type__" in value:
        cls = _resolve_class(value["__type__"])
        if cls is None:
            raise TypeError(f"Refusing to decode payload type {value['__type__']!r}")
        hints = get_type_hints(cls)
        return cls(**{
            f.name: _from_json(hints.get(f.name, Any), value[f.name])
            for f in dataclasses.fields(cls)
            if f.name in value
        })
    if isinstance(hint, type) and issubclass(hint, Enum):
        return hint(value)
    if isinstance(value, list):
        return tuple(_from_json(Any, x) for x in value)
    return value


class IrswapJSONTypeConverter(JSONTypeConverter):
    """Hook _from_json into Temporal's typed decoding."""

    def to_typed_value(self, hint: type, value: Any) -> Any:
        if isinstance(value, dict) and "__type__" in value:
            return _from_json(hint, value)
        if hint in _SCALARS or (isinstance(hint, type) and issubclass(hint, Enum)):
            return _from_json(hint, value)
        return JSONTypeConverter.Unhandled


# ---------------------------------------------------------------------------
# Wire up
# ---------------------------------------------------------------------------


class IrswapPayloadConverter(CompositePayloadConverter):
    def __init__(self) -> None:
        json_converter = JSONPlainPayloadConverter(
            encoder=IrswapJSONEncoder,
            custom_type_converters=[IrswapJSONTypeConverter()],
        )
        super().__init__(
            *(
                c
                for c in DefaultPayloadConverter.default_encoding_payload_converters
                if not isinstance(c, JSONPlainPayloadConverter)
            ),
            json_converter,
        )


IRSWAP_DATA_CONVERTER = DataConverter(
    payload_converter_class=IrswapPayloadConverter,
)
