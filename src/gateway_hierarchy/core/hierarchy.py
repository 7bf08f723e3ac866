"""Read-only tree view of a gateway configuration document.

``build_hierarchy`` walks binds -> listeners -> routes -> backends in one
pass, attaching inherited context, addresses and validation issues to each
node. The result is rebuilt from scratch for every document and never
mutated.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from gateway_hierarchy.core.address import BackendKind, NodeAddress, RouteKind, backend_kind
from gateway_hierarchy.core.validation import (
    ValidationIssue,
    count_hostnames,
    validate_listener,
    validate_route,
)


class BackendNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    backend: Any
    address: NodeAddress
    backend_index: int
    kind: BackendKind
    route_kind: RouteKind
    port: int
    listener_name: str | None = None
    listener_protocol: str | None = None
    issues: list[ValidationIssue] = []

    @property
    def entity(self) -> Any:
        return self.backend


class RouteNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    route: dict[str, Any]
    address: NodeAddress
    kind: RouteKind
    category_index: int
    port: int
    listener_name: str | None = None
    listener_protocol: str | None = None
    issues: list[ValidationIssue] = []
    backends: list[BackendNode] = []

    @property
    def entity(self) -> dict[str, Any]:
        return self.route

    @property
    def is_tcp(self) -> bool:
        return self.kind == RouteKind.TCP


class ListenerNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    listener: dict[str, Any]
    address: NodeAddress
    listener_index: int
    port: int
    routes: list[RouteNode] = []
    issues: list[ValidationIssue] = []

    @property
    def entity(self) -> dict[str, Any]:
        return self.listener


class BindNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    bind: dict[str, Any]
    address: NodeAddress
    port: int
    listeners: list[ListenerNode] = []
    issues: list[ValidationIssue] = []

    @property
    def entity(self) -> dict[str, Any]:
        return self.bind


HierarchyNode = BindNode | ListenerNode | RouteNode | BackendNode


class HierarchyStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_binds: int = 0
    total_listeners: int = 0
    total_routes: int = 0
    total_top_level_backends: int = 0
    broken_backend_refs: int = 0
    total_validation_errors: int = 0


class Hierarchy(BaseModel):
    model_config = ConfigDict(frozen=True)

    binds: list[BindNode] = []
    top_level_backends: list[dict[str, Any]] = []
    top_level_policies: list[dict[str, Any]] = []
    stats: HierarchyStats = HierarchyStats()

    def iter_nodes(self) -> Iterator[HierarchyNode]:
        for bind in self.binds:
            yield bind
            for listener in bind.listeners:
                yield listener
                for route in listener.routes:
                    yield route
                    yield from route.backends

    def iter_issues(self) -> Iterator[tuple[NodeAddress, ValidationIssue]]:
        for node in self.iter_nodes():
            for issue in node.issues:
                yield node.address, issue

    def find(self, address: NodeAddress) -> HierarchyNode | None:
        """Return the node at ``address``; the first bind wins when ports repeat."""
        bind = next((b for b in self.binds if b.port == address.port), None)
        if bind is None or address.listener_index is None:
            return bind
        if address.listener_index >= len(bind.listeners):
            return None
        listener = bind.listeners[address.listener_index]
        if address.route_index is None:
            return listener
        route = next(
            (
                r
                for r in listener.routes
                if r.kind == address.route_kind and r.category_index == address.route_index
            ),
            None,
        )
        if route is None or address.backend_index is None:
            return route
        if address.backend_index >= len(route.backends):
            return None
        return route.backends[address.backend_index]


def _build_backends(
    route: Mapping[str, Any],
    route_address: NodeAddress,
    port: int,
    listener: Mapping[str, Any],
) -> list[BackendNode]:
    return [
        BackendNode(
            backend=backend,
            address=route_address.model_copy(update={"backend_index": index}),
            backend_index=index,
            kind=backend_kind(backend),
            route_kind=route_address.route_kind,
            port=port,
            listener_name=listener.get("name"),
            listener_protocol=listener.get("protocol"),
        )
        for index, backend in enumerate(route.get("backends") or [])
    ]


def build_hierarchy(document: Mapping[str, Any] | None) -> Hierarchy:
    if not document:
        return Hierarchy()

    binds_data: list[Any] = document.get("binds") or []
    top_level_backends: list[dict[str, Any]] = list(document.get("backends") or [])
    top_level_policies: list[dict[str, Any]] = list(document.get("policies") or [])
    backend_names = {b.get("name") for b in top_level_backends if b.get("name")}
    hostname_counts = count_hostnames(binds_data)

    total_listeners = 0
    total_routes = 0
    broken_refs = 0
    total_issues = 0

    bind_nodes: list[BindNode] = []
    for bind in binds_data:
        port = bind.get("port")
        listener_nodes: list[ListenerNode] = []
        for listener_index, listener in enumerate(bind.get("listeners") or []):
            total_listeners += 1
            listener_address = NodeAddress(port=port, listener_index=listener_index)
            listener_issues = validate_listener(listener, port, hostname_counts)
            total_issues += len(listener_issues)
            context = {
                "port": port,
                "listener_name": listener.get("name"),
                "listener_protocol": listener.get("protocol"),
            }

            route_nodes: list[RouteNode] = []
            for index, route in enumerate(listener.get("routes") or []):
                route_address = listener_address.model_copy(update={"route_index": index})
                route_issues, broken = validate_route(route, listener, backend_names)
                broken_refs += broken
                total_issues += len(route_issues)
                route_nodes.append(
                    RouteNode(
                        route=route,
                        address=route_address,
                        kind=RouteKind.HTTP,
                        category_index=index,
                        issues=route_issues,
                        backends=_build_backends(route, route_address, port, listener),
                        **context,
                    )
                )
            for index, route in enumerate(listener.get("tcpRoutes") or []):
                route_address = listener_address.model_copy(
                    update={"route_kind": RouteKind.TCP, "route_index": index}
                )
                route_nodes.append(
                    RouteNode(
                        route=route,
                        address=route_address,
                        kind=RouteKind.TCP,
                        category_index=index,
                        backends=_build_backends(route, route_address, port, listener),
                        **context,
                    )
                )
            total_routes += len(route_nodes)

            listener_nodes.append(
                ListenerNode(
                    listener=listener,
                    address=listener_address,
                    listener_index=listener_index,
                    port=port,
                    routes=route_nodes,
                    issues=listener_issues,
                )
            )

        bind_nodes.append(BindNode(bind=bind, address=NodeAddress(port=port), port=port, listeners=listener_nodes))

    return Hierarchy(
        binds=bind_nodes,
        top_level_backends=top_level_backends,
        top_level_policies=top_level_policies,
        stats=HierarchyStats(
            total_binds=len(bind_nodes),
            total_listeners=total_listeners,
            total_routes=total_routes,
            total_top_level_backends=len(top_level_backends),
            broken_backend_refs=broken_refs,
            total_validation_errors=total_issues,
        ),
    )
