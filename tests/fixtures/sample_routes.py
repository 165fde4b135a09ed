"""Routing tree used by the CLI tests."""

from dataclasses import dataclass
from http import HTTPStatus

from specguard.modules.controllers import EmptyBodyInput, Input, NoContent, path
from specguard.modules.routing import Routing
from specguard.types import HttpHeader


@dataclass
class Entity:
    id: int
    code: str


class GetEntity(EmptyBodyInput):
    id: int = path()


class CreateEntity(Input[Entity]):
    pass


def build_routing() -> Routing:
    routing = Routing()
    api = routing.route("/api")
    api.get("/{id}", GetEntity).responds(Entity).errors(HTTPStatus.NOT_FOUND)
    api.post("/", CreateEntity).responds(
        NoContent, HTTPStatus.CREATED, headers=[HttpHeader(name="Location")]
    ).errors(HTTPStatus.BAD_REQUEST)
    routing.get("/health").responds(NoContent)
    return routing


routing = build_routing()
not_a_routing = 42
