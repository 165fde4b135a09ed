"""Route Analyzer.

Walks a routing tree and describes every route under the configured base
paths as an OpenAPI Document. Nothing is executed: the analyzer only reads
the declared inputs and responses attached to each route.
"""

import logging
from typing import Any

from specguard.errors import AnalysisError, MissingResponsesError, UnknownParameterDelegateError
from specguard.types import (
    AnalyzerConfig,
    Document,
    Header,
    HttpMethod,
    MediaType,
    Operation,
    Parameter,
    Path,
    RequestBody,
    Response,
)

from .controllers import Delegate, Input, NoBody, NoContent, ParamDelegate, ResponseDescriptor
from .routing import INPUT_KEY, RESPONSES_KEY, MethodSelector, Route
from .schema_deriver import derive_content_schema, derive_schema


logger = logging.getLogger("specguard.analyzer")


class DocumentBuilder:
    """Accumulates operations by path pattern during one analysis run."""

    def __init__(self) -> None:
        self._operations: dict[str, list[Operation]] = {}

    def add(self, pattern: str, operation: Operation) -> None:
        self._operations.setdefault(pattern, []).append(operation)

    def build(self) -> Document:
        return Document(
            paths=[Path(pattern=pattern, operations=operations) for pattern, operations in self._operations.items()]
        )


class OpenAPIAnalyzer:
    """Analyzes a routing tree and produces a Document describing it.

    The analyzer holds per-run state and is not safe for concurrent
    ``analyze()`` calls on the same instance.

    Args:
        routing: Root of the routing tree.
        config: Analysis settings. Keyword overrides build one when omitted.
    """

    def __init__(self, routing: Route, config: AnalyzerConfig | None = None, **overrides: Any) -> None:
        self.routing = routing
        self.config = config if config is not None else AnalyzerConfig(**overrides)
        self._builder = DocumentBuilder()

    def analyze(self) -> Document:
        """Analyze the routing tree.

        Returns:
            Document with one Path per route pattern.

        Raises:
            AnalysisError: In case of any failure. Partial documents are never returned.
        """
        try:
            self._builder = DocumentBuilder()
            self._analyze_route(self.routing)
            document = self._builder.build()
        except AnalysisError:
            raise
        except Exception as e:
            raise AnalysisError(str(e) or type(e).__name__, cause=e) from e

        logger.info(f"Analyzed {len(document.paths)} paths")
        return document

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def _analyze_route(self, route: Route) -> None:
        if route.children:
            for child in route.children:
                self._analyze_route(child)
            return

        # An empty routing tree has nothing to describe
        if route.parent is None:
            return

        path = str(route.parent)
        if not self._is_included(path):
            logger.debug(f"Skipping {path}: outside base paths")
            return

        method = self._analyze_method(route, path)
        logger.debug(f"Analyzing {method.value} {path}")

        deprecated, parameters, request_body = self._analyze_input(route, method)
        responses = self._analyze_responses(route, path, method)

        self._builder.add(
            path,
            Operation(
                method=method.value.lower(),
                responses=responses,
                request_body=request_body,
                parameters=parameters or None,
                deprecated=deprecated,
            ),
        )

    def _is_included(self, path: str) -> bool:
        return any(
            path == base or (len(path) > len(base) and path[: len(base) + 1] == f"{base}/")
            for base in self.config.base_paths
        )

    def _analyze_method(self, route: Route, path: str) -> HttpMethod:
        if not isinstance(route.selector, MethodSelector):
            raise AnalysisError(f"Route leaf under {path} has no HTTP method selector: {route.selector!r}")
        return route.selector.method

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def _analyze_input(
        self,
        route: Route,
        method: HttpMethod,
    ) -> tuple[bool, list[Parameter] | None, RequestBody | None]:
        provider = route.attributes.get(INPUT_KEY)
        if provider is None:
            return False, None, None

        shape: Input[Any] = provider()
        deprecated = bool(shape.deprecated)

        request_body = None
        body_type = shape.body_type()
        if body_type is not NoBody and not _is_no_content(body_type):
            content_type = shape.content_type or self.config.default_content_type
            schema = derive_content_schema(content_type, body_type, method)
            request_body = RequestBody(
                content=[MediaType(content_type=content_type, schema=schema)],
                required=shape.body_required,
            )

        parameters = [
            self._analyze_parameter(shape, delegate, method)
            for _, delegate in shape.properties()
            if isinstance(delegate, Delegate)
        ]

        return deprecated, parameters, request_body

    def _analyze_parameter(self, shape: Input[Any], delegate: Delegate, method: HttpMethod) -> Parameter:
        if not isinstance(delegate, ParamDelegate) or getattr(delegate, "location", None) is None:
            raise UnknownParameterDelegateError(
                f"Unknown delegate {type(delegate).__name__} in class {type(shape).__qualname__}"
            )

        default = None if delegate.required else delegate.default
        return Parameter(
            name=delegate.name,
            location=delegate.location,
            required=delegate.required,
            deprecated=delegate.deprecated,
            schema=derive_schema(delegate.value_type(), method, default=default),
        )

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def _analyze_responses(self, route: Route, path: str, method: HttpMethod) -> list[Response]:
        declared: list[ResponseDescriptor] | None = route.attributes.get(RESPONSES_KEY)
        if not declared:
            raise MissingResponsesError(path)

        return [self._analyze_response(response, method) for response in declared]

    def _analyze_response(self, response: ResponseDescriptor, method: HttpMethod) -> Response:
        content = None
        body_type = response.type if response.type is not None else self.config.default_error_type
        if not _is_no_content(body_type):
            content_type = response.content_type or self.config.default_content_type
            schema = derive_content_schema(content_type, body_type, method)
            content = [MediaType(content_type=content_type, schema=schema)]

        declared_headers = [*self.config.default_response_headers, *(response.headers or [])]
        headers = [
            Header(
                name=header.name,
                required=header.required,
                deprecated=header.deprecated,
                schema=derive_schema(header.type, method),
            )
            for header in declared_headers
        ]

        return Response(
            status=str(response.status.value),
            content=content,
            description=response.status.phrase,
            headers=headers or None,
        )


def analyze_routes(routing: Route, config: AnalyzerConfig | None = None, **overrides: Any) -> Document:
    """Analyze a routing tree with a fresh analyzer.

    Safe to call concurrently: every call owns its analyzer state.
    """
    return OpenAPIAnalyzer(routing, config, **overrides).analyze()


def _is_no_content(body_type: Any) -> bool:
    if body_type is None or body_type is type(None) or body_type is NoBody:
        return True
    return isinstance(body_type, type) and issubclass(body_type, NoContent)
