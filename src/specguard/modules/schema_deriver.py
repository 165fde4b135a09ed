"""Type-to-Schema Deriver.

Turns type descriptors (or Python types, via reflection) into OpenAPI
Schema Objects. Pure functions: no state, no I/O.
"""

import enum
import logging
from typing import Any

from specguard.descriptors import (
    ArrayType,
    EnumType,
    ListType,
    MapType,
    NullableType,
    ObjectType,
    PatchMode,
    PrimitiveArrayType,
    PrimitiveKind,
    PrimitiveType,
    SetType,
    TypeDescriptor,
)
from specguard.errors import UnsupportedContentTypeError, UnsupportedTypeError
from specguard.types import ContentType, HttpMethod, Property, Schema, SchemaType

from .reflection import describe


logger = logging.getLogger("specguard.deriver")

# Mapping of primitive kinds to OpenAPI (type, format)
PRIMITIVE_SCHEMAS: dict[PrimitiveKind, tuple[SchemaType, str | None]] = {
    PrimitiveKind.INT32: (SchemaType.INTEGER, "int32"),
    PrimitiveKind.INT64: (SchemaType.INTEGER, "int64"),
    PrimitiveKind.FLOAT: (SchemaType.NUMBER, "float"),
    PrimitiveKind.DOUBLE: (SchemaType.NUMBER, "double"),
    PrimitiveKind.BOOLEAN: (SchemaType.BOOLEAN, None),
    PrimitiveKind.CHAR: (SchemaType.STRING, None),
    PrimitiveKind.STRING: (SchemaType.STRING, None),
    PrimitiveKind.BYTE: (SchemaType.STRING, "binary"),
    PrimitiveKind.BYTES: (SchemaType.STRING, "binary"),
    PrimitiveKind.DATE: (SchemaType.STRING, "date"),
    PrimitiveKind.DATE_TIME: (SchemaType.STRING, "date-time"),
    PrimitiveKind.TIME: (SchemaType.STRING, "time"),
}

# Arrays of these kinds are plain strings on the wire
_TEXTUAL_ARRAYS: dict[PrimitiveKind, PrimitiveKind] = {
    PrimitiveKind.CHAR: PrimitiveKind.STRING,
    PrimitiveKind.BYTE: PrimitiveKind.BYTES,
}

_TEXT_KEYS = (PrimitiveKind.STRING, PrimitiveKind.CHAR)


def derive_content_schema(
    content_type: str,
    type_: Any,
    http_method: HttpMethod = HttpMethod.GET,
) -> Schema:
    """Derive the schema of a payload served as ``content_type``.

    Plain text is always a string and octet-stream always a binary string,
    whatever the underlying type. JSON defers to ``derive_schema``.

    Raises:
        UnsupportedContentTypeError: For any other content type.
        UnsupportedTypeError: If the JSON payload type cannot be described.
    """
    http_method = _as_method(http_method)
    try:
        known = ContentType(content_type.lower())
    except ValueError:
        raise UnsupportedContentTypeError(content_type) from None

    if known is ContentType.TEXT_PLAIN:
        return Schema(type=SchemaType.STRING)
    if known is ContentType.OCTET_STREAM:
        return Schema(type=SchemaType.STRING, format="binary")
    return derive_schema(type_, http_method)


def derive_schema(
    type_: Any,
    http_method: HttpMethod = HttpMethod.GET,
    deprecated: bool = False,
    default: Any = None,
) -> Schema:
    """Derive an OpenAPI Schema Object for a type.

    Args:
        type_: A type descriptor or a Python type.
        http_method: Method of the operation the type appears in. It decides
            which fields of partial-update types are required.
        deprecated: Whether the schema is marked deprecated.
        default: Default value, surfaced on primitive and enum schemas.

    Returns:
        The derived Schema.

    Raises:
        UnsupportedTypeError: If no mapping rule applies.
        MissingConstructorError: If an object type does not declare its fields.
    """
    return _derive(describe(type_), _as_method(http_method), deprecated, default, nullable=False)


def _derive(
    descriptor: TypeDescriptor,
    http_method: HttpMethod,
    deprecated: bool,
    default: Any,
    nullable: bool,
) -> Schema:
    if isinstance(descriptor, NullableType):
        return _derive(descriptor.inner, http_method, deprecated, default, nullable=True)

    if isinstance(descriptor, PrimitiveType):
        return _primitive_schema(descriptor.kind, deprecated, nullable, default)

    if isinstance(descriptor, PrimitiveArrayType):
        if descriptor.kind in _TEXTUAL_ARRAYS:
            return _primitive_schema(_TEXTUAL_ARRAYS[descriptor.kind], deprecated, nullable, default)
        return Schema(
            title=descriptor.type_name,
            type=SchemaType.ARRAY,
            deprecated=deprecated,
            nullable=nullable,
            default=default,
            items=_primitive_schema(descriptor.kind, False, False, None),
        )

    if isinstance(descriptor, (ArrayType, ListType)):
        suffix = "Array" if isinstance(descriptor, ArrayType) else "List"
        return Schema(
            title=f"{descriptor.item.type_name}{suffix}",
            type=SchemaType.ARRAY,
            deprecated=deprecated,
            nullable=nullable,
            items=_derive(descriptor.item, http_method, False, None, nullable=False),
        )

    if isinstance(descriptor, SetType):
        return Schema(
            title=f"{descriptor.item.type_name}Set",
            type=SchemaType.ARRAY,
            deprecated=deprecated,
            nullable=nullable,
            unique_items=True,
            items=_derive(descriptor.item, http_method, False, None, nullable=False),
        )

    if isinstance(descriptor, MapType):
        return _map_schema(descriptor, http_method, deprecated, nullable)

    if isinstance(descriptor, EnumType):
        if isinstance(default, enum.Enum):
            default = default.name
        return Schema(
            title=f"{descriptor.type_name}Enum",
            type=SchemaType.STRING,
            deprecated=deprecated,
            nullable=nullable,
            default=default,
            enum=list(descriptor.members),
        )

    if isinstance(descriptor, ObjectType):
        return _object_schema(descriptor, http_method, deprecated, nullable)

    raise UnsupportedTypeError(f"Cannot transform {descriptor!r} to OpenAPI Schema Object: unknown transformation", descriptor)


def _primitive_schema(kind: PrimitiveKind, deprecated: bool, nullable: bool, default: Any) -> Schema:
    if kind not in PRIMITIVE_SCHEMAS:
        # PrimitiveKind.ANY: refuse to emit an unconstrained schema
        raise UnsupportedTypeError(f"Cannot transform {kind.name.title()} to OpenAPI Schema Object: unknown transformation", kind)
    schema_type, fmt = PRIMITIVE_SCHEMAS[kind]
    return Schema(type=schema_type, deprecated=deprecated, nullable=nullable, format=fmt, default=default)


def _map_schema(descriptor: MapType, http_method: HttpMethod, deprecated: bool, nullable: bool) -> Schema:
    key = descriptor.key
    if not (isinstance(key, PrimitiveType) and key.kind in _TEXT_KEYS):
        raise UnsupportedTypeError(
            f"Cannot transform map keyed by {key.type_name} to OpenAPI Schema Object: keys must be text",
            descriptor,
        )

    value = descriptor.value
    if isinstance(value, PrimitiveType) and value.kind is PrimitiveKind.ANY:
        value_schema = None
        title = descriptor.type_name
    else:
        value_schema = _derive(value, http_method, False, None, nullable=False)
        title = f"{value.type_name}Map"

    return Schema(
        title=title,
        type=SchemaType.OBJECT,
        deprecated=deprecated,
        nullable=nullable,
        additional_properties=value_schema,
    )


def _object_schema(descriptor: ObjectType, http_method: HttpMethod, deprecated: bool, nullable: bool) -> Schema:
    properties = [
        Property(
            name=field.name,
            schema=_derive(field.type, http_method, field.deprecated, None, nullable=False),
        )
        for field in sorted(descriptor.fields, key=lambda f: f.name)
    ]

    if descriptor.patch:
        # Patch-backed fields are required only as the patch policy says
        required = {field.name for field in descriptor.fields if field.required and field.patch is None}
        required |= _patch_required(descriptor, http_method)
    else:
        required = {field.name for field in descriptor.fields if field.required}

    logger.debug(f"Derived object {descriptor.type_name} ({http_method.value}): required={sorted(required)}")

    return Schema(
        title=descriptor.type_name,
        type=SchemaType.OBJECT,
        deprecated=deprecated,
        nullable=nullable,
        required=sorted(required) if required else None,
        properties=properties,
    )


def _patch_required(descriptor: ObjectType, http_method: HttpMethod) -> set[str]:
    """Required fields contributed by patch delegates.

    Under PATCH only fields marked required-in-patch count. Under any other
    method the patch type is a full replacement and every patch-backed
    field is required.
    """
    if http_method is HttpMethod.PATCH:
        return {f.name for f in descriptor.fields if f.patch is PatchMode.REQUIRED}
    return {f.name for f in descriptor.fields if f.patch is not None}


def _as_method(http_method: HttpMethod | str) -> HttpMethod:
    if isinstance(http_method, HttpMethod):
        return http_method
    return HttpMethod(http_method.upper())
