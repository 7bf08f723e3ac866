"""Positional addressing of binds, listeners, routes and backends.

A node is identified by the port of its bind followed by indices into each
nested sequence. HTTP and TCP routes live in separate sequences on a
listener, so a route index is only meaningful together with its kind.

Addresses also have a path form used as a tree key and in URLs::

    bind/8080/listener/0/tcproute/1/backend/2
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from gateway_hierarchy.core.errors import AddressNotFoundError


class NodeType(StrEnum):
    BIND = "bind"
    LISTENER = "listener"
    ROUTE = "route"
    BACKEND = "backend"


class RouteKind(StrEnum):
    HTTP = "http"
    TCP = "tcp"


class EditOperation(StrEnum):
    CREATE = "create"
    UPDATE = "update"


class SchemaCategory(StrEnum):
    BINDS = "binds"
    LISTENERS = "listeners"
    ROUTES = "routes"
    TCP_ROUTES = "tcpRoutes"
    ROUTE_BACKENDS = "routeBackends"
    TCP_ROUTE_BACKENDS = "tcpRouteBackends"


class BackendKind(StrEnum):
    HOST = "host"
    SERVICE = "service"
    AI = "ai"
    MCP = "mcp"
    DYNAMIC = "dynamic"
    REFERENCE = "reference"
    UNKNOWN = "unknown"


NODE_LABELS: dict[NodeType, str] = {
    NodeType.BIND: "Bind",
    NodeType.LISTENER: "Listener",
    NodeType.ROUTE: "Route",
    NodeType.BACKEND: "Backend",
}

SCHEMA_TYPE_MAP: dict[SchemaCategory, str] = {
    SchemaCategory.BINDS: "LocalBind",
    SchemaCategory.LISTENERS: "LocalListener",
    SchemaCategory.ROUTES: "LocalRoute",
    SchemaCategory.TCP_ROUTES: "LocalTCPRoute",
    SchemaCategory.ROUTE_BACKENDS: "LocalRouteBackend",
    SchemaCategory.TCP_ROUTE_BACKENDS: "LocalTCPRouteBackend",
}

SCHEMA_FOLDER_MAP: dict[SchemaCategory, str] = {
    SchemaCategory.BINDS: "listeners",
    SchemaCategory.LISTENERS: "listeners",
    SchemaCategory.ROUTES: "routes",
    SchemaCategory.TCP_ROUTES: "routes",
    SchemaCategory.ROUTE_BACKENDS: "backends",
    SchemaCategory.TCP_ROUTE_BACKENDS: "backends",
}

# Inline backend variants, checked in this order.
_INLINE_BACKEND_KINDS = (BackendKind.HOST, BackendKind.SERVICE, BackendKind.AI, BackendKind.MCP, BackendKind.DYNAMIC)

_PATH_PATTERN = re.compile(
    r"^bind/(?P<port>\d+)"
    r"(?:/listener/(?P<listener>\d+)"
    r"(?:/(?P<kind>route|tcproute)/(?P<route>\d+)"
    r"(?:/backend/(?P<backend>\d+))?)?)?$"
)


def category_for(node_type: NodeType, route_kind: RouteKind = RouteKind.HTTP) -> SchemaCategory:
    """Return the schema category used to edit a node of the given type."""
    tcp = route_kind == RouteKind.TCP
    if node_type == NodeType.BIND:
        return SchemaCategory.BINDS
    if node_type == NodeType.LISTENER:
        return SchemaCategory.LISTENERS
    if node_type == NodeType.ROUTE:
        return SchemaCategory.TCP_ROUTES if tcp else SchemaCategory.ROUTES
    return SchemaCategory.TCP_ROUTE_BACKENDS if tcp else SchemaCategory.ROUTE_BACKENDS


def route_field(route_kind: RouteKind) -> str:
    """Name of the listener field holding routes of the given kind."""
    return "tcpRoutes" if route_kind == RouteKind.TCP else "routes"


class NodeAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    port: int
    listener_index: int | None = Field(default=None, ge=0)
    route_kind: RouteKind = RouteKind.HTTP
    route_index: int | None = Field(default=None, ge=0)
    backend_index: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_depth(self) -> NodeAddress:
        if self.route_index is not None and self.listener_index is None:
            raise ValueError("route_index requires listener_index")
        if self.backend_index is not None and self.route_index is None:
            raise ValueError("backend_index requires route_index")
        return self

    @property
    def node_type(self) -> NodeType:
        if self.backend_index is not None:
            return NodeType.BACKEND
        if self.route_index is not None:
            return NodeType.ROUTE
        if self.listener_index is not None:
            return NodeType.LISTENER
        return NodeType.BIND

    @property
    def schema_category(self) -> SchemaCategory:
        return category_for(self.node_type, self.route_kind)

    def parent(self) -> NodeAddress | None:
        """Return the address of the enclosing node, or None for a bind."""
        node_type = self.node_type
        if node_type == NodeType.BIND:
            return None
        if node_type == NodeType.LISTENER:
            return NodeAddress(port=self.port)
        if node_type == NodeType.ROUTE:
            return NodeAddress(port=self.port, listener_index=self.listener_index)
        return self.model_copy(update={"backend_index": None})

    def to_path(self) -> str:
        parts = [f"bind/{self.port}"]
        if self.listener_index is not None:
            parts.append(f"listener/{self.listener_index}")
        if self.route_index is not None:
            segment = "tcproute" if self.route_kind == RouteKind.TCP else "route"
            parts.append(f"{segment}/{self.route_index}")
        if self.backend_index is not None:
            parts.append(f"backend/{self.backend_index}")
        return "/".join(parts)

    @classmethod
    def parse(cls, path: str) -> NodeAddress:
        """Parse the path form of an address.

        Raises ``AddressNotFoundError`` when the path is malformed.
        """
        match = _PATH_PATTERN.match(path.strip().strip("/"))
        if match is None:
            raise AddressNotFoundError(f"Malformed node path: {path!r}")

        def _int(name: str) -> int | None:
            raw = match.group(name)
            return int(raw) if raw is not None else None

        try:
            return cls(
                port=int(match.group("port")),
                listener_index=_int("listener"),
                route_kind=RouteKind.TCP if match.group("kind") == "tcproute" else RouteKind.HTTP,
                route_index=_int("route"),
                backend_index=_int("backend"),
            )
        except ValidationError as exc:
            raise AddressNotFoundError(f"Malformed node path: {path!r}") from exc

    def __str__(self) -> str:
        return self.to_path()


def named_backend_ref(backend: Any) -> str | None:
    """Return the referenced top-level backend name, or None for inline backends."""
    if not isinstance(backend, dict):
        return None
    ref = backend.get("backend")
    return ref if isinstance(ref, str) else None


def backend_kind(backend: Any) -> BackendKind:
    """Classify a route backend by the variant key it carries."""
    if named_backend_ref(backend) is not None:
        return BackendKind.REFERENCE
    if isinstance(backend, dict):
        for kind in _INLINE_BACKEND_KINDS:
            if kind.value in backend:
                return kind
    return BackendKind.UNKNOWN
