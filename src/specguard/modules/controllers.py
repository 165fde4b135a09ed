"""Controller building blocks: inputs, parameter delegates and responses.

Routes describe what they accept by attaching an ``Input`` subclass and
what they return by attaching ``ResponseDescriptor`` objects. The analyzer
reads both without running any request.

Example:
    class GetEntity(EmptyBodyInput):
        code: str = path(name="entityCode")
        limit: Int32 = query(default=0)
"""

from http import HTTPStatus
from typing import Any, ClassVar, Generic, Iterator, TypeVar, get_args, get_origin, get_type_hints

from pydantic import BaseModel, ConfigDict, Field

from specguard.descriptors import PatchMode
from specguard.types import HttpHeader, ParameterLocation


BodyT = TypeVar("BodyT")

_UNSET: Any = object()


class NoBody:
    """Body type of inputs that carry no request body."""


class NoContent:
    """Body type of responses that carry no content."""


# ============================================================================
# Partial updates
# ============================================================================


class Patch:
    """Marks a field of a ``PatchOf`` model as backed by a patch delegate.

    Use it through ``typing.Annotated``::

        class EntityPatch(PatchOf):
            code: Annotated[str | None, Patch(required=True)] = None
            name: Annotated[str | None, Patch()] = None

    ``required=True`` keeps the field required even in a PATCH request.
    """

    def __init__(self, required: bool = False) -> None:
        self.required = required

    @property
    def mode(self) -> PatchMode:
        return PatchMode.REQUIRED if self.required else PatchMode.OPTIONAL

    def __repr__(self) -> str:
        return f"Patch(required={self.required})"


class PatchOf(BaseModel):
    """Base for models that describe a sparse update of another type."""


# ============================================================================
# Parameter delegates
# ============================================================================


class Delegate:
    """A class attribute of an input backed by part of the request."""

    def __init__(self, name: str | None = None, *, deprecated: bool = False, type: Any = None) -> None:
        self.name = name
        self.deprecated = deprecated
        self.type = type
        self.attribute: str | None = None
        self.owner: type | None = None

    def __set_name__(self, owner: type, attribute: str) -> None:
        self.owner = owner
        self.attribute = attribute
        if self.name is None:
            self.name = attribute

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.__dict__.get(self.attribute, None)

    def value_type(self) -> Any:
        """Declared type of the value: explicit ``type`` or the attribute annotation."""
        if self.type is not None:
            return self.type
        hints = get_type_hints(self.owner, include_extras=True) if self.owner else {}
        if self.attribute not in hints:
            raise TypeError(f"Cannot determine type of {self.attribute} in {getattr(self.owner, '__qualname__', self.owner)}")
        return hints[self.attribute]


class ParamDelegate(Delegate):
    """Delegate reading a named request parameter."""

    location: ClassVar[ParameterLocation]

    def __init__(
        self,
        name: str | None = None,
        *,
        required: bool | None = None,
        default: Any = _UNSET,
        deprecated: bool = False,
        type: Any = None,
    ) -> None:
        super().__init__(name, deprecated=deprecated, type=type)
        self.has_default = default is not _UNSET
        self.default = default if self.has_default else None
        self.required = (not self.has_default) if required is None else required

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.__dict__.get(self.attribute, self.default)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, required={self.required})"


class PathParam(ParamDelegate):
    location = ParameterLocation.PATH

    def __init__(self, name: str | None = None, *, deprecated: bool = False, type: Any = None) -> None:
        super().__init__(name, required=True, deprecated=deprecated, type=type)


class QueryParam(ParamDelegate):
    location = ParameterLocation.QUERY


class HeaderParam(ParamDelegate):
    location = ParameterLocation.HEADER


def path(name: str | None = None, *, deprecated: bool = False, type: Any = None) -> PathParam:
    """Declare a path parameter. Path parameters are always required."""
    return PathParam(name, deprecated=deprecated, type=type)


def query(
    name: str | None = None,
    *,
    required: bool | None = None,
    default: Any = _UNSET,
    deprecated: bool = False,
    type: Any = None,
) -> QueryParam:
    """Declare a query parameter. It is required unless a default is given."""
    return QueryParam(name, required=required, default=default, deprecated=deprecated, type=type)


def header(
    name: str | None = None,
    *,
    required: bool | None = None,
    default: Any = _UNSET,
    deprecated: bool = False,
    type: Any = None,
) -> HeaderParam:
    """Declare a header parameter. It is required unless a default is given."""
    return HeaderParam(name, required=required, default=default, deprecated=deprecated, type=type)


# ============================================================================
# Inputs
# ============================================================================


class Input(Generic[BodyT]):
    """Declared input of a route.

    The type argument is the request body type; ``NoBody`` means the route
    takes no body. Parameters are declared as class attributes backed by
    ``path()``, ``query()`` or ``header()``.
    """

    __body_type__: ClassVar[Any] = NoBody

    deprecated: bool = False
    content_type: str | None = None
    body_required: bool = True

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for base in cls.__dict__.get("__orig_bases__", ()):
            if get_origin(base) is Input:
                cls.__body_type__ = get_args(base)[0]

    @classmethod
    def body_type(cls) -> Any:
        return cls.__body_type__

    def properties(self) -> Iterator[tuple[str, Any]]:
        """Publicly visible class attributes, base classes first."""
        seen: dict[str, Any] = {}
        for klass in reversed(type(self).__mro__):
            for name, value in vars(klass).items():
                if not name.startswith("_"):
                    seen[name] = value
        yield from seen.items()


class EmptyBodyInput(Input[NoBody]):
    """Input without a request body."""


# ============================================================================
# Responses
# ============================================================================


class ResponseDescriptor(BaseModel):
    """A response a route declares it may produce.

    ``type`` is the body type; ``None`` falls back to the analyzer's default
    error type and ``NoContent`` means the response has no body.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: HTTPStatus
    type: Any = None
    content_type: str | None = None
    headers: list[HttpHeader] | None = Field(default=None)
