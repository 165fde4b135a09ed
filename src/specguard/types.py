"""Core type definitions for SpecGuard.

The OpenAPI structural subset shared by the analyzer, the reader and the
matcher. All types use Pydantic and are immutable once built.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================


class HttpMethod(str, Enum):
    """Supported HTTP methods."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class SchemaType(str, Enum):
    """OpenAPI schema types produced by the analyzer."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


class ParameterLocation(str, Enum):
    """Where a parameter is carried in the request."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"


class ContentType(str, Enum):
    """Content types the schema deriver knows how to describe."""

    JSON = "application/json"
    TEXT_PLAIN = "text/plain"
    OCTET_STREAM = "application/octet-stream"


# ============================================================================
# OpenAPI Model
# ============================================================================


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Schema(_Model):
    """Recursive description of a value's shape."""

    title: str | None = None
    type: SchemaType
    deprecated: bool = False
    nullable: bool = False
    format: str | None = None
    default: Any = None
    unique_items: bool | None = Field(default=None, alias="uniqueItems")
    required: list[str] | None = Field(
        default=None,
        description="Sorted names of required properties",
    )
    properties: list["Property"] | None = Field(
        default=None,
        description="Object properties ordered by name",
    )
    additional_properties: "Schema | None" = Field(default=None, alias="additionalProperties")
    items: "Schema | None" = None
    enum: list[str] | None = None


class Property(_Model):
    """A named property of an object schema."""

    name: str
    schema_: Schema = Field(alias="schema")


Schema.model_rebuild()
Property.model_rebuild()


class Parameter(_Model):
    """An operation parameter."""

    name: str
    location: ParameterLocation = Field(alias="in")
    required: bool = False
    deprecated: bool = False
    description: str | None = None
    schema_: Schema = Field(alias="schema")


class Header(_Model):
    """A response header."""

    name: str
    required: bool = False
    deprecated: bool = False
    schema_: Schema = Field(alias="schema")


class MediaType(_Model):
    """A schema served under a content type."""

    content_type: str = Field(alias="contentType")
    schema_: Schema = Field(alias="schema")


class RequestBody(_Model):
    """Request body of an operation."""

    content: list[MediaType]
    required: bool = False


class Response(_Model):
    """A single declared response of an operation."""

    status: str
    content: list[MediaType] | None = None
    description: str | None = None
    headers: list[Header] | None = None


class Operation(_Model):
    """One HTTP method exposed on a path."""

    method: str = Field(description="Lower-case HTTP method name")
    responses: list[Response]
    request_body: RequestBody | None = Field(default=None, alias="requestBody")
    parameters: list[Parameter] | None = None
    deprecated: bool = False


class Path(_Model):
    """All operations exposed under a single path pattern."""

    pattern: str
    operations: list[Operation] = Field(default_factory=list)

    def find_operation(self, method: str) -> Operation | None:
        """Find an operation by HTTP method, case-insensitively."""
        method = method.lower()
        for operation in self.operations:
            if operation.method.lower() == method:
                return operation
        return None


class Document(_Model):
    """A full API description: either parsed from a spec or analyzed from routes."""

    paths: list[Path] = Field(default_factory=list)

    def find_path(self, pattern: str) -> Path | None:
        """Find a path by its exact pattern."""
        for path in self.paths:
            if path.pattern == pattern:
                return path
        return None


# ============================================================================
# Analyzer Configuration
# ============================================================================


class HttpHeader(BaseModel):
    """A header declared on a response.

    The type may be any Python type or type descriptor understood by the
    schema deriver.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    required: bool = True
    deprecated: bool = False
    type: Any = str


class AnalyzerConfig(BaseModel):
    """Settings for a route analysis run."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    base_paths: list[str] = Field(
        default_factory=lambda: [""],
        description="Only routes equal to or below one of these paths are analyzed",
    )
    default_response_headers: list[HttpHeader] = Field(
        default_factory=list,
        description="Headers present in every response, listed before declared ones",
    )
    default_content_type: str = Field(
        default=ContentType.JSON.value,
        description="Content type used when an input or response declares none",
    )
    default_error_type: Any = Field(
        default=None,
        description="Body type of responses declared without one; None means no content",
    )
