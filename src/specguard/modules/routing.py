"""Routing tree.

Routes form a tree: path nodes group children under a path segment and
method nodes are the leaves that handle one HTTP method. Each node has an
attribute store; the analyzer reads the declared input provider and the
declared responses from it.

Example:
    routing = Routing()
    api = routing.route("/api")
    api.get("/{id}", GetEntity).responds(Entity).errors(HTTPStatus.NOT_FOUND)
"""

from http import HTTPStatus
from typing import Any, Callable

from specguard.types import HttpHeader, HttpMethod

from .controllers import Input, ResponseDescriptor


# Well-known attribute keys
INPUT_KEY = "specguard.input"
RESPONSES_KEY = "specguard.responses"


class PathSelector:
    """Selects requests by a path segment (possibly templated, e.g. ``{id}``)."""

    def __init__(self, segment: str) -> None:
        self.segment = segment.strip("/")

    def __repr__(self) -> str:
        return f"PathSelector({self.segment!r})"


class MethodSelector:
    """Selects requests by HTTP method."""

    def __init__(self, method: HttpMethod | str) -> None:
        self.method = HttpMethod(method.upper()) if isinstance(method, str) else method

    def __repr__(self) -> str:
        return f"MethodSelector({self.method.value})"


class Route:
    """A node of the routing tree."""

    def __init__(self, parent: "Route | None" = None, selector: PathSelector | MethodSelector | None = None) -> None:
        self.parent = parent
        self.selector = selector
        self.children: list[Route] = []
        self.attributes: dict[str, Any] = {}

    @property
    def path(self) -> str:
        """Full path pattern of this node, computed from its ancestry."""
        segments: list[str] = []
        node: Route | None = self
        while node is not None:
            if isinstance(node.selector, PathSelector) and node.selector.segment:
                segments.append(node.selector.segment)
            node = node.parent
        return "/" + "/".join(reversed(segments))

    def __str__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return f"Route({self.path!r}, {self.selector!r})"

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def route(self, path: str) -> "Route":
        """Get or create the child grouping routes under ``path``."""
        segment = path.strip("/")
        if not segment:
            return self
        for child in self.children:
            if isinstance(child.selector, PathSelector) and child.selector.segment == segment:
                return child
        child = Route(self, PathSelector(segment))
        self.children.append(child)
        return child

    def method(
        self,
        method: HttpMethod | str,
        path: str = "",
        input: Callable[[], Input[Any]] | None = None,
    ) -> "Route":
        """Add a leaf handling ``method`` under ``path``.

        ``input`` is a zero-argument callable, usually an ``Input`` subclass,
        producing an instance of the declared input.
        """
        target = self.route(path)
        leaf = Route(target, MethodSelector(method))
        if input is not None:
            leaf.attributes[INPUT_KEY] = input
        target.children.append(leaf)
        return leaf

    def get(self, path: str = "", input: Callable[[], Input[Any]] | None = None) -> "Route":
        return self.method(HttpMethod.GET, path, input)

    def post(self, path: str = "", input: Callable[[], Input[Any]] | None = None) -> "Route":
        return self.method(HttpMethod.POST, path, input)

    def put(self, path: str = "", input: Callable[[], Input[Any]] | None = None) -> "Route":
        return self.method(HttpMethod.PUT, path, input)

    def patch(self, path: str = "", input: Callable[[], Input[Any]] | None = None) -> "Route":
        return self.method(HttpMethod.PATCH, path, input)

    def delete(self, path: str = "", input: Callable[[], Input[Any]] | None = None) -> "Route":
        return self.method(HttpMethod.DELETE, path, input)

    def head(self, path: str = "", input: Callable[[], Input[Any]] | None = None) -> "Route":
        return self.method(HttpMethod.HEAD, path, input)

    def options(self, path: str = "", input: Callable[[], Input[Any]] | None = None) -> "Route":
        return self.method(HttpMethod.OPTIONS, path, input)

    def responds(
        self,
        type: Any,
        status: HTTPStatus = HTTPStatus.OK,
        *,
        content_type: str | None = None,
        headers: list[HttpHeader] | None = None,
    ) -> "Route":
        """Declare a response with a body of ``type``."""
        self._add_response(ResponseDescriptor(status=status, type=type, content_type=content_type, headers=headers))
        return self

    def errors(
        self,
        status: HTTPStatus,
        type: Any = None,
        *,
        content_type: str | None = None,
        headers: list[HttpHeader] | None = None,
    ) -> "Route":
        """Declare an error response; without ``type`` the default error type applies."""
        self._add_response(ResponseDescriptor(status=status, type=type, content_type=content_type, headers=headers))
        return self

    def _add_response(self, response: ResponseDescriptor) -> None:
        self.attributes.setdefault(RESPONSES_KEY, []).append(response)


class Routing(Route):
    """Root of a routing tree."""

    def __init__(self) -> None:
        super().__init__(parent=None, selector=None)
