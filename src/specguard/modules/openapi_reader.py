"""OpenAPI 3.x Specification Reader.

Parses OpenAPI specs into the Document model for comparison.
Handles local $ref resolution and schema normalization.
"""

import logging
from typing import Any

import yaml
from pydantic import ValidationError

from specguard.errors import DocumentParseError
from specguard.types import (
    Document,
    Header,
    HttpMethod,
    MediaType,
    Operation,
    Parameter,
    ParameterLocation,
    Path,
    Property,
    RequestBody,
    Response,
    Schema,
    SchemaType,
)


logger = logging.getLogger("specguard.reader")

_METHODS = [method.value.lower() for method in HttpMethod]


def load_document(spec: str | dict[str, Any]) -> Document:
    """Parse an OpenAPI specification.

    Args:
        spec: OpenAPI spec as YAML/JSON string or already-parsed dict.

    Returns:
        Document with every path and operation of the OpenAPI document.

    Raises:
        DocumentParseError: If the document is invalid or unsupported.
    """
    # Parse if string
    if isinstance(spec, str):
        try:
            raw_spec = yaml.safe_load(spec)
        except yaml.YAMLError as e:
            raise DocumentParseError(f"Invalid YAML/JSON document: {e}") from e
    else:
        raw_spec = spec

    if not isinstance(raw_spec, dict):
        raise DocumentParseError("OpenAPI document must be a mapping")

    # Validate OpenAPI version
    openapi_version = str(raw_spec.get("openapi", ""))
    if not openapi_version.startswith("3."):
        raise DocumentParseError(f"Unsupported OpenAPI version: {openapi_version}. Only 3.x is supported.")

    paths = _mapping(resolve_refs(raw_spec.get("paths") or {}, raw_spec), "paths")

    document = Document(
        paths=[
            _parse_path(str(pattern), _mapping(path_item or {}, f"path {pattern}"))
            for pattern, path_item in paths.items()
        ]
    )
    logger.debug(f"Loaded {len(document.paths)} paths from OpenAPI {openapi_version} document")
    return document


def load_document_from_file(file_path: str) -> Document:
    """Load and parse an OpenAPI spec from a file.

    Args:
        file_path: Path to YAML or JSON spec file.

    Returns:
        Parsed Document.
    """
    with open(file_path, encoding="utf-8") as f:
        content = f.read()
    return load_document(content)


def resolve_refs(schema: Any, full_spec: dict[str, Any], _seen: tuple[str, ...] = ()) -> Any:
    """Recursively resolve $ref references.

    Args:
        schema: Structure that may contain $ref references.
        full_spec: Full OpenAPI spec for resolving references.

    Returns:
        The structure with all references resolved.

    Raises:
        DocumentParseError: If a reference is external, unresolvable or circular.
    """
    if isinstance(schema, list):
        return [resolve_refs(item, full_spec, _seen) for item in schema]

    if not isinstance(schema, dict):
        return schema

    # Handle $ref
    if "$ref" in schema:
        ref_path = schema["$ref"]
        if ref_path in _seen:
            raise DocumentParseError(f"Circular reference: {' -> '.join(_seen + (ref_path,))}")
        resolved = _resolve_ref_path(ref_path, full_spec)
        result = resolve_refs(resolved, full_spec, _seen + (ref_path,))
        # Sibling keys override the referenced definition
        for key, value in schema.items():
            if key != "$ref":
                result[key] = resolve_refs(value, full_spec, _seen)
        return result

    return {key: resolve_refs(value, full_spec, _seen) for key, value in schema.items()}


def _resolve_ref_path(ref_path: str, full_spec: dict[str, Any]) -> dict[str, Any]:
    """Resolve a $ref path like "#/components/schemas/User"."""
    if not isinstance(ref_path, str) or not ref_path.startswith("#/"):
        raise DocumentParseError(f"External references not supported: {ref_path}")

    current: Any = full_spec
    for part in ref_path[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            raise DocumentParseError(f"Cannot resolve reference: {ref_path}")

    if not isinstance(current, dict):
        raise DocumentParseError(f"Reference does not resolve to an object: {ref_path}")

    return current


# ============================================================================
# Paths and operations
# ============================================================================


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DocumentParseError(f"{where}: expected a mapping, got {type(value).__name__}")
    return value


def _sequence(value: Any, where: str) -> list[Any]:
    if not isinstance(value, list):
        raise DocumentParseError(f"{where}: expected a list, got {type(value).__name__}")
    return value


def _parse_path(pattern: str, path_item: dict[str, Any]) -> Path:
    shared_parameters = _sequence(path_item.get("parameters") or [], f"{pattern} parameters")
    operations = [
        _parse_operation(
            pattern,
            method,
            _mapping(path_item[method] or {}, f"{method.upper()} {pattern}"),
            shared_parameters,
        )
        for method in _METHODS
        if method in path_item
    ]
    return Path(pattern=pattern, operations=operations)


def _parse_operation(
    pattern: str,
    method: str,
    operation: dict[str, Any],
    shared_parameters: list[dict[str, Any]],
) -> Operation:
    where = f"{method.upper()} {pattern}"

    # Operation-level parameters override path-level ones with the same name and location
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for raw in [*shared_parameters, *_sequence(operation.get("parameters") or [], f"{where} parameters")]:
        raw = _mapping(raw, f"{where} parameter")
        merged[(str(raw.get("name")), str(raw.get("in")))] = raw
    parameters = [
        parameter
        for parameter in (_parse_parameter(raw, where) for raw in merged.values())
        if parameter is not None
    ]

    request_body = None
    raw_body = operation.get("requestBody")
    if raw_body:
        raw_body = _mapping(raw_body, f"{where} requestBody")
        request_body = RequestBody(
            content=_parse_content(
                _mapping(raw_body.get("content") or {}, f"{where} requestBody content"),
                f"{where} requestBody",
            ),
            required=bool(raw_body.get("required", False)),
        )

    responses = [
        _parse_response(str(status), _mapping(raw or {}, f"{where} response {status}"), where)
        for status, raw in _mapping(operation.get("responses") or {}, f"{where} responses").items()
    ]

    return Operation(
        method=method,
        responses=responses,
        request_body=request_body,
        parameters=parameters or None,
        deprecated=bool(operation.get("deprecated", False)),
    )


def _parse_parameter(raw: dict[str, Any], where: str) -> Parameter | None:
    name = raw.get("name")
    location = raw.get("in")
    if not name or not location:
        raise DocumentParseError(f"{where}: parameter requires 'name' and 'in'")

    try:
        parameter_location = ParameterLocation(location)
    except ValueError:
        logger.warning(f"{where}: ignoring parameter '{name}' in unsupported location '{location}'")
        return None

    if "schema" not in raw:
        raise DocumentParseError(f"{where}: parameter '{name}' has no schema")

    schema = parse_schema(raw["schema"], f"{where} parameter '{name}'")
    try:
        return Parameter(
            name=name,
            location=parameter_location,
            required=bool(raw.get("required", False)),
            deprecated=bool(raw.get("deprecated", False)),
            description=raw.get("description"),
            schema=schema,
        )
    except ValidationError as e:
        raise DocumentParseError(f"{where} parameter '{name}': {e}") from e


def _parse_response(status: str, raw: dict[str, Any], where: str) -> Response:
    where = f"{where} response {status}"
    content = raw.get("content")
    raw_headers = _mapping(raw.get("headers") or {}, f"{where} headers")
    headers = [
        _parse_header(str(name), _mapping(header or {}, f"{where} header '{name}'"), where)
        for name, header in raw_headers.items()
    ]
    try:
        return Response(
            status=status,
            content=_parse_content(_mapping(content, f"{where} content"), where) if content else None,
            description=raw.get("description"),
            headers=headers or None,
        )
    except ValidationError as e:
        raise DocumentParseError(f"{where}: {e}") from e


def _parse_header(name: str, raw: dict[str, Any], where: str) -> Header:
    where = f"{where} header '{name}'"
    return Header(
        name=name,
        required=bool(raw.get("required", False)),
        deprecated=bool(raw.get("deprecated", False)),
        schema=parse_schema(raw.get("schema") or {}, where),
    )


def _parse_content(content: dict[str, Any], where: str) -> list[MediaType]:
    media_types = []
    for content_type, media in content.items():
        if not isinstance(media, dict) or "schema" not in media:
            raise DocumentParseError(f"{where}: media type '{content_type}' has no schema")
        media_types.append(
            MediaType(content_type=str(content_type), schema=parse_schema(media["schema"], f"{where} {content_type}"))
        )
    return media_types


# ============================================================================
# Schemas
# ============================================================================


def parse_schema(raw: dict[str, Any], where: str = "schema") -> Schema:
    """Parse a resolved OpenAPI Schema Object.

    Raises:
        DocumentParseError: If the schema type cannot be determined or a
            keyword has the wrong shape.
    """
    if not isinstance(raw, dict):
        raise DocumentParseError(f"{where}: schema must be an object")

    schema_type, nullable = _schema_type(raw, where)

    properties = None
    if "properties" in raw:
        raw_properties = _mapping(raw.get("properties") or {}, f"{where}.properties")
        properties = [
            Property(name=name, schema=parse_schema(value, f"{where}.{name}"))
            for name, value in sorted((str(name), value) for name, value in raw_properties.items())
        ]

    additional_properties = None
    if isinstance(raw.get("additionalProperties"), dict):
        additional_properties = parse_schema(raw["additionalProperties"], f"{where}.additionalProperties")

    items = None
    if "items" in raw:
        items = parse_schema(raw["items"], f"{where}.items")

    required = _sequence(raw.get("required") or [], f"{where}.required")
    if not all(isinstance(name, str) for name in required):
        raise DocumentParseError(f"{where}.required: property names must be strings, got {required}")
    enum = _sequence(raw.get("enum") or [], f"{where}.enum")

    try:
        return Schema(
            title=raw.get("title"),
            type=schema_type,
            deprecated=bool(raw.get("deprecated", False)),
            nullable=nullable,
            format=raw.get("format"),
            default=raw.get("default"),
            unique_items=raw.get("uniqueItems"),
            required=sorted(required) or None,
            properties=properties,
            additional_properties=additional_properties,
            items=items,
            enum=[str(value) for value in enum if value is not None] or None,
        )
    except ValidationError as e:
        raise DocumentParseError(f"{where}: {e}") from e


def _schema_type(raw: dict[str, Any], where: str) -> tuple[SchemaType, bool]:
    nullable = bool(raw.get("nullable", False))
    declared = raw.get("type")

    # OpenAPI 3.1 style: type: [string, "null"]
    if isinstance(declared, list):
        nullable = nullable or "null" in declared
        declared_types = [value for value in declared if value != "null"]
        if len(declared_types) != 1:
            raise DocumentParseError(f"{where}: unsupported type list {declared}")
        declared = declared_types[0]

    if declared is None:
        # Infer from the keywords present
        if "properties" in raw or "additionalProperties" in raw:
            declared = "object"
        elif "items" in raw:
            declared = "array"
        elif "enum" in raw:
            declared = "string"
        else:
            raise DocumentParseError(f"{where}: cannot determine schema type")

    try:
        return SchemaType(declared), nullable
    except ValueError:
        raise DocumentParseError(f"{where}: unsupported schema type '{declared}'") from None
