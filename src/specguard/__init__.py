"""SpecGuard - validate an OpenAPI specification against the routes that serve it."""

__version__ = "0.1.0"
