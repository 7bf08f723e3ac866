"""Structural create/update/delete on the configuration document.

Both entry points are pure: the input document is never mutated. Every
container on the path from the root to the edited node is shallow-copied and
replaced, so everything off that path is shared by reference with the input.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Set
from dataclasses import dataclass
from typing import Any

from gateway_hierarchy.core.address import (
    EditOperation,
    NodeAddress,
    NodeType,
    RouteKind,
    category_for,
    route_field,
)
from gateway_hierarchy.core.errors import AddressNotFoundError, InvalidNodeError, InvariantViolationError
from gateway_hierarchy.core.forms import preserve_child_fields, strip_form_defaults

logger = logging.getLogger(__name__)

Document = dict[str, Any]


def _find_bind(binds: list[Any], port: int | None) -> int | None:
    for index, bind in enumerate(binds):
        if bind.get("port") == port:
            return index
    return None


def _require_bind(binds: list[Any], port: int) -> int:
    index = _find_bind(binds, port)
    if index is None:
        raise AddressNotFoundError(f"Bind on port {port} not found")
    return index


def _require_index(items: list[Any], index: int | None, label: str, address: NodeAddress) -> int:
    if index is None or not 0 <= index < len(items):
        raise AddressNotFoundError(f"{label} {index} not found at {address}")
    return index


def check_route_exclusion(listener: Mapping[str, Any], route_kind: RouteKind) -> None:
    """Raise when a route of ``route_kind`` may not live on ``listener``."""
    if route_kind == RouteKind.TCP and listener.get("routes"):
        raise InvariantViolationError(
            "Cannot add a TCP route to a listener that already has HTTP routes. "
            "Remove the existing HTTP routes first."
        )
    if route_kind == RouteKind.HTTP and listener.get("tcpRoutes"):
        raise InvariantViolationError(
            "Cannot add an HTTP route to a listener that already has TCP routes. "
            "Remove the existing TCP routes first."
        )


def check_listener_exclusion(listener: Mapping[str, Any]) -> None:
    """Raise when a listener value carries both HTTP and TCP routes."""
    if listener.get("routes") and listener.get("tcpRoutes"):
        raise InvariantViolationError(
            f'Listener "{listener.get("name") or "unnamed"}" cannot have both HTTP and TCP routes. '
            "Keep only one kind of route."
        )


def _require_port(bind: Mapping[str, Any]) -> None:
    port = bind.get("port")
    if not isinstance(port, int) or isinstance(port, bool):
        raise InvalidNodeError(f"A bind needs an integer port, got {port!r}")


@dataclass
class _ListenerPath:
    """Copies of every container from the document root down to one listener."""

    document: Document
    binds: list[Any]
    bind_index: int
    bind: dict[str, Any]
    listeners: list[Any]
    listener_index: int
    listener: dict[str, Any]

    @classmethod
    def open(cls, document: Mapping[str, Any] | None, address: NodeAddress) -> _ListenerPath:
        doc = dict(document or {})
        binds = list(doc.get("binds") or [])
        bind_index = _require_bind(binds, address.port)
        bind = dict(binds[bind_index])
        listeners = list(bind.get("listeners") or [])
        listener_index = _require_index(listeners, address.listener_index, "Listener", address)
        return cls(doc, binds, bind_index, bind, listeners, listener_index, dict(listeners[listener_index]))

    def commit(self) -> Document:
        self.listeners[self.listener_index] = self.listener
        self.bind["listeners"] = self.listeners
        self.binds[self.bind_index] = self.bind
        self.document["binds"] = self.binds
        return self.document


def apply_edit(
    document: Mapping[str, Any] | None,
    address: NodeAddress,
    node_type: NodeType,
    operation: EditOperation,
    raw_value: Mapping[str, Any] | None,
    keep_keys: Set[str] | None = None,
) -> Document:
    """Return the document with one node created or updated from form output.

    For ``create``, ``address`` names the parent (extra indices are ignored);
    for ``update`` it names the node itself. Route and backend edits use
    ``address.route_kind`` to pick ``routes`` or ``tcpRoutes``.
    """
    node_type = NodeType(node_type)
    operation = EditOperation(operation)
    is_new = operation == EditOperation.CREATE
    form: dict[str, Any] = strip_form_defaults(raw_value, keep_keys) or {}
    category = category_for(node_type, address.route_kind)

    def merged(existing: Mapping[str, Any]) -> dict[str, Any]:
        return form if is_new else preserve_child_fields(form, existing, category)

    if node_type == NodeType.BIND:
        doc = dict(document or {})
        binds = list(doc.get("binds") or [])
        _require_port(form)
        if is_new:
            for listener in form.get("listeners") or []:
                check_listener_exclusion(listener)
            if _find_bind(binds, form.get("port")) is not None:
                logger.warning("Bind on port %s already exists; adding a duplicate", form.get("port"))
            binds.append({"listeners": [], **form})
        else:
            index = _require_bind(binds, address.port)
            binds[index] = merged(binds[index])
        doc["binds"] = binds
        return doc

    if node_type == NodeType.LISTENER:
        if is_new:
            check_listener_exclusion(form)
        doc = dict(document or {})
        binds = list(doc.get("binds") or [])
        bind_index = _find_bind(binds, address.port)
        if bind_index is None:
            if not is_new:
                raise AddressNotFoundError(f"Bind on port {address.port} not found")
            binds.append({"port": address.port, "listeners": [form]})
            doc["binds"] = binds
            return doc
        bind = dict(binds[bind_index])
        listeners = list(bind.get("listeners") or [])
        if is_new:
            listeners.append(form)
        else:
            index = _require_index(listeners, address.listener_index, "Listener", address)
            listeners[index] = merged(listeners[index])
        bind["listeners"] = listeners
        binds[bind_index] = bind
        doc["binds"] = binds
        return doc

    path = _ListenerPath.open(document, address)
    field = route_field(address.route_kind)
    routes = list(path.listener.get(field) or [])

    if node_type == NodeType.ROUTE:
        check_route_exclusion(path.listener, address.route_kind)
        if is_new:
            routes.append(form)
        else:
            index = _require_index(routes, address.route_index, "Route", address)
            routes[index] = merged(routes[index])
    else:
        route_index = _require_index(routes, address.route_index, "Route", address)
        route = dict(routes[route_index])
        backends = list(route.get("backends") or [])
        if is_new:
            backends.append(form)
        else:
            index = _require_index(backends, address.backend_index, "Backend", address)
            backends[index] = merged(backends[index])
        route["backends"] = backends
        routes[route_index] = route

    path.listener[field] = routes
    return path.commit()


def apply_delete(document: Mapping[str, Any] | None, address: NodeAddress, node_type: NodeType) -> Document:
    """Return the document with the node at ``address`` and everything beneath it removed."""
    node_type = NodeType(node_type)

    if node_type == NodeType.BIND:
        doc = dict(document or {})
        binds = list(doc.get("binds") or [])
        del binds[_require_bind(binds, address.port)]
        doc["binds"] = binds
        return doc

    if node_type == NodeType.LISTENER:
        doc = dict(document or {})
        binds = list(doc.get("binds") or [])
        bind_index = _require_bind(binds, address.port)
        bind = dict(binds[bind_index])
        listeners = list(bind.get("listeners") or [])
        del listeners[_require_index(listeners, address.listener_index, "Listener", address)]
        bind["listeners"] = listeners
        binds[bind_index] = bind
        doc["binds"] = binds
        return doc

    path = _ListenerPath.open(document, address)
    field = route_field(address.route_kind)
    routes = list(path.listener.get(field) or [])
    route_index = _require_index(routes, address.route_index, "Route", address)

    if node_type == NodeType.ROUTE:
        del routes[route_index]
    else:
        route = dict(routes[route_index])
        backends = list(route.get("backends") or [])
        del backends[_require_index(backends, address.backend_index, "Backend", address)]
        route["backends"] = backends
        routes[route_index] = route

    path.listener[field] = routes
    return path.commit()
