"""Type descriptors.

An explicit, inspectable model of the types the schema deriver understands.
Descriptors are either written by hand or built from Python annotations by
``specguard.modules.reflection``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class PrimitiveKind(str, Enum):
    """Leaf value types."""

    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    CHAR = "char"
    STRING = "string"
    BYTE = "byte"
    BYTES = "bytes"
    DATE = "date"
    DATE_TIME = "date-time"
    TIME = "time"
    ANY = "any"


# Simple names used when building titles such as "IntegerList"
PRIMITIVE_NAMES: dict[PrimitiveKind, str] = {
    PrimitiveKind.INT32: "Integer",
    PrimitiveKind.INT64: "Long",
    PrimitiveKind.FLOAT: "Float",
    PrimitiveKind.DOUBLE: "Double",
    PrimitiveKind.BOOLEAN: "Boolean",
    PrimitiveKind.CHAR: "Char",
    PrimitiveKind.STRING: "String",
    PrimitiveKind.BYTE: "Byte",
    PrimitiveKind.BYTES: "Bytes",
    PrimitiveKind.DATE: "Date",
    PrimitiveKind.DATE_TIME: "DateTime",
    PrimitiveKind.TIME: "Time",
    PrimitiveKind.ANY: "Any",
}


class PatchMode(str, Enum):
    """How a field of a partial-update type is backed."""

    OPTIONAL = "optional"
    REQUIRED = "required"


@dataclass(frozen=True)
class PrimitiveType:
    kind: PrimitiveKind

    @property
    def type_name(self) -> str:
        return PRIMITIVE_NAMES[self.kind]


@dataclass(frozen=True)
class PrimitiveArrayType:
    """Fixed-size array of a primitive, e.g. an array of 32-bit integers."""

    kind: PrimitiveKind

    @property
    def type_name(self) -> str:
        return f"{PRIMITIVE_NAMES[self.kind]}Array"


@dataclass(frozen=True)
class ArrayType:
    """Native array of arbitrary items."""

    item: "TypeDescriptor"
    type_name: str = "Array"


@dataclass(frozen=True)
class ListType:
    item: "TypeDescriptor"
    type_name: str = "List"


@dataclass(frozen=True)
class SetType:
    item: "TypeDescriptor"
    type_name: str = "Set"


@dataclass(frozen=True)
class MapType:
    """Map keyed by text; ``key`` is only kept to reject other key types."""

    value: "TypeDescriptor"
    key: "TypeDescriptor" = PrimitiveType(PrimitiveKind.STRING)
    type_name: str = "Map"


@dataclass(frozen=True)
class EnumType:
    type_name: str
    members: tuple[str, ...]


@dataclass(frozen=True)
class FieldDescriptor:
    """A publicly visible field of an object type.

    ``required`` means the field has no default and must always be supplied.
    ``patch`` is set when the field is backed by a patch delegate.
    """

    name: str
    type: "TypeDescriptor"
    required: bool = True
    deprecated: bool = False
    patch: PatchMode | None = None


@dataclass(frozen=True)
class ObjectType:
    type_name: str
    fields: tuple[FieldDescriptor, ...] = field(default_factory=tuple)
    patch: bool = False


@dataclass(frozen=True)
class NullableType:
    inner: "TypeDescriptor"

    @property
    def type_name(self) -> str:
        return self.inner.type_name


TypeDescriptor = Union[
    PrimitiveType,
    PrimitiveArrayType,
    ArrayType,
    ListType,
    SetType,
    MapType,
    EnumType,
    ObjectType,
    NullableType,
]

DESCRIPTOR_TYPES: tuple[type, ...] = (
    PrimitiveType,
    PrimitiveArrayType,
    ArrayType,
    ListType,
    SetType,
    MapType,
    EnumType,
    ObjectType,
    NullableType,
)


def is_descriptor(value: Any) -> bool:
    """Check whether a value is already a type descriptor."""
    return isinstance(value, DESCRIPTOR_TYPES)
