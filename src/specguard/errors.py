"""Exception hierarchy for SpecGuard."""

from typing import Any


class SpecGuardError(Exception):
    """Base class for all SpecGuard errors."""


# ============================================================================
# Schema derivation
# ============================================================================


class SchemaDerivationError(SpecGuardError):
    """A type could not be turned into an OpenAPI Schema Object."""

    def __init__(self, message: str, type_: Any = None) -> None:
        super().__init__(message)
        self.type_ = type_


class UnsupportedTypeError(SchemaDerivationError):
    """No mapping rule applies to the type."""


class UnsupportedContentTypeError(SchemaDerivationError):
    """The content type has no schema transformation."""

    def __init__(self, content_type: str) -> None:
        super().__init__(
            f"Cannot transform content type {content_type} to OpenAPI Schema Object: no transformation"
        )
        self.content_type = content_type


class MissingConstructorError(SchemaDerivationError):
    """An object type does not declare the fields needed to find required ones."""


# ============================================================================
# Analysis
# ============================================================================


class AnalysisError(SpecGuardError):
    """Route analysis failed. Wraps the originating failure, if any."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class MissingResponsesError(AnalysisError):
    """A route declares no responses."""

    def __init__(self, path: str) -> None:
        super().__init__(f"There are no responses declared for path: {path}")
        self.path = path


class UnknownParameterDelegateError(AnalysisError):
    """An input property is backed by a delegate the analyzer does not know."""


# ============================================================================
# Document parsing
# ============================================================================


class DocumentParseError(SpecGuardError, ValueError):
    """The specification document is malformed or unsupported."""
