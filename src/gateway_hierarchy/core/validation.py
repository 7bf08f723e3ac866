"""Advisory checks applied while the hierarchy is built.

Issues are data attached to nodes; nothing here raises or blocks a save.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Set
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from gateway_hierarchy.core.address import named_backend_ref

HTTP_PROTOCOLS: frozenset[str] = frozenset({"HTTP", "HTTPS"})
TCP_PROTOCOLS: frozenset[str] = frozenset({"TCP"})

WILDCARD_HOSTNAME = "*"


class IssueLevel(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class ValidationIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: IssueLevel
    message: str


HostnameCounts = Counter[tuple[str, int]]


def count_hostnames(binds: list[Any]) -> HostnameCounts:
    """Count (hostname, port) pairs over every listener of every bind."""
    counts: HostnameCounts = Counter()
    for bind in binds:
        for listener in bind.get("listeners") or []:
            hostname = listener.get("hostname")
            if hostname:
                counts[(hostname, bind.get("port"))] += 1
    return counts


def validate_listener(listener: Mapping[str, Any], port: int, hostname_counts: HostnameCounts) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    hostname = listener.get("hostname")
    if hostname and hostname != WILDCARD_HOSTNAME and hostname_counts[(hostname, port)] > 1:
        issues.append(
            ValidationIssue(
                level=IssueLevel.WARNING,
                message=f'Hostname "{hostname}" is used by multiple listeners on port {port}.',
            )
        )

    protocol = listener.get("protocol")
    if protocol in HTTP_PROTOCOLS and listener.get("tcpRoutes"):
        issues.append(
            ValidationIssue(
                level=IssueLevel.WARNING,
                message=f'Listener "{listener.get("name") or "unnamed"}" has TCP routes but uses protocol {protocol}.',
            )
        )

    return issues


def broken_backend_refs(route: Mapping[str, Any], backend_names: Set[str]) -> list[str]:
    """Return named backend references on the route that are not defined at the top level."""
    broken: list[str] = []
    for backend in route.get("backends") or []:
        ref = named_backend_ref(backend)
        if ref is not None and ref not in backend_names:
            broken.append(ref)
    return broken


def validate_route(
    route: Mapping[str, Any],
    listener: Mapping[str, Any],
    backend_names: Set[str],
) -> tuple[list[ValidationIssue], int]:
    """Validate an HTTP route.

    Returns the issues and the number of broken backend references among them.
    """
    issues: list[ValidationIssue] = []
    route_name = route.get("name") or "unnamed"

    if listener.get("protocol") in TCP_PROTOCOLS and route.get("matches"):
        issues.append(
            ValidationIssue(
                level=IssueLevel.WARNING,
                message=f'Route "{route_name}" has HTTP match conditions but is attached to a TCP listener.',
            )
        )

    broken = broken_backend_refs(route, backend_names)
    for ref in broken:
        issues.append(
            ValidationIssue(
                level=IssueLevel.ERROR,
                message=f'Route "{route_name}" references backend "{ref}" which is not defined in config.backends.',
            )
        )

    return issues, len(broken)
