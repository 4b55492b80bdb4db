"""
Argument decoding for tool calls.

Hosts send tool arguments as a loose JSON mapping. Each tool declares a
parameter record (a frozen dataclass) whose fields carry a ``Param`` in their
metadata; ``decode`` validates and coerces the mapping into that record and
``schema_for`` derives the JSON input schema advertised to the host from the
same metadata.

Rules:
- required fields that are missing or of the wrong kind are rejected with
  "<field> is required and must be <kind>"
- numeric identifiers arrive as floats, must be positive whole numbers and
  are narrowed to int
- string lists must be lists; non-string elements are dropped
- absent optional fields and explicit nulls both take the field's zero value
- range constraints are checked here, never in handlers
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import MISSING, Field, dataclass, field, fields
import ipaddress
from typing import Any, TypeVar

from cloud_mcp.errors import ParameterError

PARAM_KEY = "cloud_mcp.param"

T = TypeVar("T")


@dataclass(frozen=True)
class Param:
    """Decoding metadata for one parameter-record field."""

    kind: str  # string | id | integer | boolean | strings | object | objects | ip
    description: str
    required: bool = False
    minimum: int | None = None
    maximum: int | None = None
    unit: str = ""
    choices: tuple[str, ...] = ()

    def expected(self) -> str:
        """Human description of the accepted kind, used in error messages."""
        if self.choices:
            return "one of: " + ", ".join(self.choices)
        if self.kind == "id":
            return "a positive number"
        if self.kind == "integer":
            unit = f" {self.unit}" if self.unit else ""
            if self.minimum is not None and self.maximum is not None:
                return f"between {self.minimum} and {self.maximum}{unit}"
            if self.minimum is not None:
                return f"at least {self.minimum}{unit}"
            if self.maximum is not None:
                return f"at most {self.maximum}{unit}"
            return "a whole number"
        return {
            "string": "a non-empty string",
            "boolean": "a boolean",
            "strings": "a list of strings",
            "object": "an object",
            "objects": "a list of objects",
            "ip": "a valid IP address",
        }[self.kind]


def _param_field(param: Param, default: Any = MISSING, default_factory: Any = MISSING) -> Any:
    if default_factory is not MISSING:
        return field(default_factory=default_factory, metadata={PARAM_KEY: param})
    return field(default=default, metadata={PARAM_KEY: param})


def string(
    description: str,
    *,
    required: bool = False,
    choices: tuple[str, ...] = (),
    default: str = "",
) -> Any:
    return _param_field(Param("string", description, required, choices=choices), default)


def identifier(description: str, *, required: bool = False) -> Any:
    return _param_field(Param("id", description, required), 0)


def integer(
    description: str,
    *,
    required: bool = False,
    minimum: int | None = None,
    maximum: int | None = None,
    unit: str = "",
    default: int = 0,
) -> Any:
    return _param_field(
        Param("integer", description, required, minimum=minimum, maximum=maximum, unit=unit),
        default,
    )


def boolean(description: str, *, default: bool = False) -> Any:
    return _param_field(Param("boolean", description), default)


def string_list(description: str, *, required: bool = False) -> Any:
    return _param_field(Param("strings", description, required), default_factory=list)


def mapping(description: str, *, required: bool = False) -> Any:
    return _param_field(Param("object", description, required), default_factory=dict)


def mapping_list(description: str, *, required: bool = False) -> Any:
    return _param_field(Param("objects", description, required), default_factory=list)


def ip_address(description: str, *, required: bool = False) -> Any:
    return _param_field(Param("ip", description, required), "")


@dataclass(frozen=True)
class NoParams:
    """Parameter record for tools without arguments."""


def _zero(f: Field) -> Any:
    if f.default_factory is not MISSING:
        return f.default_factory()
    return f.default


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _reject(name: str, param: Param) -> ParameterError:
    if param.required:
        return ParameterError(f"{name} is required and must be {param.expected()}")
    return ParameterError(f"{name} must be {param.expected()}")


def _decode_value(name: str, param: Param, value: Any, f: Field) -> Any:
    if value is None:
        if param.required:
            raise _reject(name, param)
        return _zero(f)

    kind = param.kind
    if kind in ("string", "ip"):
        if not isinstance(value, str) or (param.required and value == ""):
            raise _reject(name, param)
        if value == "":
            return value
        if param.choices and value not in param.choices:
            raise _reject(name, param)
        if kind == "ip":
            try:
                ipaddress.ip_address(value)
            except ValueError:
                raise _reject(name, param) from None
        return value

    if kind in ("id", "integer"):
        if not _is_number(value) or not float(value).is_integer():
            raise _reject(name, param)
        number = int(value)
        if kind == "id" and number <= 0:
            raise _reject(name, param)
        if param.minimum is not None and number < param.minimum:
            raise _reject(name, param)
        if param.maximum is not None and number > param.maximum:
            raise _reject(name, param)
        return number

    if kind == "boolean":
        if not isinstance(value, bool):
            raise _reject(name, param)
        return value

    if kind == "strings":
        if not isinstance(value, list):
            raise _reject(name, param)
        return [item for item in value if isinstance(item, str)]

    if kind == "object":
        if not isinstance(value, Mapping):
            raise _reject(name, param)
        return dict(value)

    if kind == "objects":
        if not isinstance(value, list) or not all(isinstance(item, Mapping) for item in value):
            raise _reject(name, param)
        return [dict(item) for item in value]

    raise ValueError(f"unknown parameter kind: {kind}")


def decode(record_type: type[T], arguments: Mapping[str, Any] | None) -> T:
    """Validate ``arguments`` and build a ``record_type`` instance.

    Raises:
        ParameterError: naming the first offending field (declaration order).
    """
    arguments = arguments or {}
    values: dict[str, Any] = {}
    for f in fields(record_type):  # type: ignore[arg-type]
        param = f.metadata.get(PARAM_KEY)
        if param is None:
            continue
        values[f.name] = _decode_value(f.name, param, arguments.get(f.name), f)
    return record_type(**values)


_SCHEMA_TYPES = {
    "string": {"type": "string"},
    "ip": {"type": "string"},
    "id": {"type": "number", "minimum": 1},
    "integer": {"type": "number"},
    "boolean": {"type": "boolean"},
    "strings": {"type": "array", "items": {"type": "string"}},
    "object": {"type": "object"},
    "objects": {"type": "array", "items": {"type": "object"}},
}


def schema_for(record_type: type) -> dict[str, Any]:
    """JSON schema for a parameter record, as advertised in tools/list."""
    properties: dict[str, Any] = {}
    required: list[str] = []
    for f in fields(record_type):
        param = f.metadata.get(PARAM_KEY)
        if param is None:
            continue
        prop = dict(_SCHEMA_TYPES[param.kind])
        prop["description"] = param.description
        if param.minimum is not None:
            prop["minimum"] = param.minimum
        if param.maximum is not None:
            prop["maximum"] = param.maximum
        if param.choices:
            prop["enum"] = list(param.choices)
        default = _zero(f)
        # Out-of-range defaults are "not provided" sentinels, not real defaults.
        sentinel = (
            param.minimum is not None and isinstance(default, int) and default < param.minimum
        )
        if default not in ("", 0, False, [], {}) and not sentinel:
            prop["default"] = default
        properties[f.name] = prop
        if param.required:
            required.append(f.name)
    return {"type": "object", "properties": properties, "required": required}
