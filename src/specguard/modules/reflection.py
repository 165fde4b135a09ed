"""Type Reflection.

Builds type descriptors from Python annotations: pydantic models,
dataclasses, ``typing`` generics, enums and the standard scalar types.
Descriptors passed in are returned unchanged.
"""

import dataclasses
import datetime
import enum
import types
import typing
from collections.abc import Mapping, MutableMapping, MutableSequence, MutableSet, Sequence
from collections.abc import Set as AbstractSet
from typing import Annotated, Any

from pydantic import BaseModel

from specguard.descriptors import (
    ArrayType,
    EnumType,
    FieldDescriptor,
    ListType,
    MapType,
    NullableType,
    ObjectType,
    PrimitiveKind,
    PrimitiveType,
    SetType,
    TypeDescriptor,
    is_descriptor,
)
from specguard.errors import MissingConstructorError, UnsupportedTypeError

from .controllers import Patch, PatchOf


# Width markers for use with Annotated
Int32 = Annotated[int, PrimitiveKind.INT32]
Int64 = Annotated[int, PrimitiveKind.INT64]
Float32 = Annotated[float, PrimitiveKind.FLOAT]
Float64 = Annotated[float, PrimitiveKind.DOUBLE]
Char = Annotated[str, PrimitiveKind.CHAR]
Byte = Annotated[int, PrimitiveKind.BYTE]

# Mapping of Python scalar types to primitive kinds
PYTHON_PRIMITIVES: dict[Any, PrimitiveKind] = {
    bool: PrimitiveKind.BOOLEAN,
    int: PrimitiveKind.INT64,
    float: PrimitiveKind.DOUBLE,
    str: PrimitiveKind.STRING,
    bytes: PrimitiveKind.BYTES,
    bytearray: PrimitiveKind.BYTES,
    datetime.datetime: PrimitiveKind.DATE_TIME,
    datetime.date: PrimitiveKind.DATE,
    datetime.time: PrimitiveKind.TIME,
    Any: PrimitiveKind.ANY,
    object: PrimitiveKind.ANY,
}

_LIST_ORIGINS = (list, Sequence, MutableSequence)
_SET_ORIGINS = (set, frozenset, AbstractSet, MutableSet)
_MAP_ORIGINS = (dict, Mapping, MutableMapping)


def describe(tp: Any) -> TypeDescriptor:
    """Build a type descriptor for a Python type.

    Args:
        tp: A Python type or annotation, or an existing descriptor.

    Returns:
        The descriptor for the type.

    Raises:
        UnsupportedTypeError: If no descriptor can represent the type.
        MissingConstructorError: If a class does not declare its fields.
    """
    return _describe(tp, ())


def _describe(tp: Any, stack: tuple[Any, ...]) -> TypeDescriptor:
    if is_descriptor(tp):
        return tp

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is Annotated:
        for marker in args[1:]:
            if isinstance(marker, PrimitiveKind):
                return PrimitiveType(marker)
        return _describe(args[0], stack)

    # Optional / unions
    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in args if arg is not type(None)]
        if len(members) == 1 and len(members) < len(args):
            return NullableType(_describe(members[0], stack))
        raise UnsupportedTypeError(f"Cannot transform union {tp} to OpenAPI Schema Object: unknown transformation", tp)

    if origin is not None:
        return _describe_generic(tp, origin, args, stack)

    if tp in PYTHON_PRIMITIVES:
        return PrimitiveType(PYTHON_PRIMITIVES[tp])

    # Bare containers carry no item type
    if tp in (list, tuple, set, frozenset, dict):
        return _describe_generic(tp, tp, (), stack)

    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return EnumType(tp.__name__, tuple(member.name for member in tp))

    if isinstance(tp, type):
        if tp in stack:
            raise UnsupportedTypeError(f"Cannot transform recursive type {tp.__name__} to OpenAPI Schema Object", tp)
        return _describe_class(tp, stack + (tp,))

    raise UnsupportedTypeError(f"Cannot transform {tp!r} to OpenAPI Schema Object: unknown transformation", tp)


def _describe_generic(tp: Any, origin: Any, args: tuple[Any, ...], stack: tuple[Any, ...]) -> TypeDescriptor:
    if origin is tuple:
        # Only homogeneous tuples (tuple[X, ...]) are arrays
        if len(args) == 2 and args[1] is Ellipsis:
            return ArrayType(_describe(args[0], stack))
        raise UnsupportedTypeError(f"Cannot transform tuple {tp} to OpenAPI Schema Object: unknown transformation", tp)

    if origin in _LIST_ORIGINS:
        return ListType(_describe(args[0] if args else Any, stack))

    if origin in _SET_ORIGINS:
        return SetType(_describe(args[0] if args else Any, stack))

    if origin in _MAP_ORIGINS:
        key, value = args if len(args) == 2 else (str, Any)
        name = "Map" if origin is not dict else "Dict"
        return MapType(value=_describe(value, stack), key=_describe(key, stack), type_name=name)

    raise UnsupportedTypeError(f"Cannot transform {tp} to OpenAPI Schema Object: unknown transformation", tp)


def _describe_class(cls: type, stack: tuple[Any, ...]) -> ObjectType:
    if issubclass(cls, BaseModel):
        fields = tuple(_model_fields(cls, stack))
        return ObjectType(cls.__name__, fields, patch=issubclass(cls, PatchOf))

    if dataclasses.is_dataclass(cls):
        return ObjectType(cls.__name__, tuple(_dataclass_fields(cls, stack)))

    raise MissingConstructorError(
        f"Cannot transform type {cls.__name__} to OpenAPI Schema Object: missing declared fields",
        cls,
    )


def _model_fields(cls: type[BaseModel], stack: tuple[Any, ...]) -> list[FieldDescriptor]:
    result: list[FieldDescriptor] = []
    for name, info in cls.model_fields.items():
        annotation = info.annotation
        # pydantic moves Annotated metadata off the annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        patch = _patch_marker(info.metadata)
        result.append(
            FieldDescriptor(
                name=info.alias or name,
                type=_describe(annotation, stack),
                required=info.is_required(),
                deprecated=bool(getattr(info, "deprecated", None)),
                patch=patch.mode if patch else None,
            )
        )
    return result


def _dataclass_fields(cls: type, stack: tuple[Any, ...]) -> list[FieldDescriptor]:
    hints = typing.get_type_hints(cls, include_extras=True)
    result: list[FieldDescriptor] = []
    for field in dataclasses.fields(cls):
        if field.name.startswith("_"):
            continue
        annotation = hints.get(field.name, field.type)
        metadata = typing.get_args(annotation)[1:] if typing.get_origin(annotation) is Annotated else ()
        patch = _patch_marker(metadata)
        required = field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING
        result.append(
            FieldDescriptor(
                name=field.name,
                type=_describe(annotation, stack),
                required=required,
                deprecated=bool(field.metadata.get("deprecated", False)),
                patch=patch.mode if patch else None,
            )
        )
    return result


def _patch_marker(metadata: Any) -> Patch | None:
    for marker in metadata:
        if isinstance(marker, Patch):
            return marker
    return None
