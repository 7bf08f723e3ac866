import asyncio
import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from gateway_hierarchy.core.address import NodeAddress
from gateway_hierarchy.core.edits import load_hierarchy
from gateway_hierarchy.core.errors import GatewayError, HierarchyError
from gateway_hierarchy.core.hierarchy import Hierarchy, RouteNode
from gateway_hierarchy.core.ports.gateway import DocumentGateway
from gateway_hierarchy.core.validation import IssueLevel, ValidationIssue

console = Console()

_LEVEL_STYLES = {IssueLevel.ERROR: "red", IssueLevel.WARNING: "yellow"}


def _get_gateway() -> "DocumentGateway":
    from gateway_hierarchy.gateway.factory import get_gateway

    return get_gateway()


def _load() -> Hierarchy:
    gateway = _get_gateway()

    async def _run() -> Hierarchy:
        try:
            return await load_hierarchy(gateway)
        finally:
            await gateway.dispose()

    try:
        return asyncio.run(_run())
    except GatewayError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc


def _issue_suffix(issues: list[ValidationIssue]) -> str:
    return "".join(f" [{_LEVEL_STYLES[i.level]}]⚠ {i.message}[/{_LEVEL_STYLES[i.level]}]" for i in issues)


def _route_label(route: RouteNode) -> str:
    kind = "TCP" if route.is_tcp else "HTTP"
    name = route.route.get("name") or "unnamed"
    hostnames = ", ".join(route.route.get("hostnames") or [])
    label = f"[cyan]{kind} route[/cyan] {name}"
    if hostnames:
        label += f" ({hostnames})"
    return label + _issue_suffix(route.issues)


def render_tree(hierarchy: Hierarchy) -> Tree:
    root = Tree("[bold]binds[/bold]")
    for bind in hierarchy.binds:
        bind_branch = root.add(f"[bold]:{bind.port}[/bold] [dim]{bind.address}[/dim]")
        for listener in bind.listeners:
            name = listener.listener.get("name") or "unnamed"
            protocol = listener.listener.get("protocol") or "HTTP"
            hostname = listener.listener.get("hostname")
            label = f"[green]listener[/green] {name} [magenta]{protocol}[/magenta]"
            if hostname:
                label += f" {hostname}"
            listener_branch = bind_branch.add(label + _issue_suffix(listener.issues))
            for route in listener.routes:
                route_branch = listener_branch.add(_route_label(route))
                for backend in route.backends:
                    route_branch.add(f"[blue]backend[/blue] {backend.kind.value} [dim]{backend.address}[/dim]")
    return root


def tree() -> None:
    """Show the bind/listener/route/backend tree with diagnostics."""
    hierarchy = _load()
    console.print(render_tree(hierarchy))


def stats() -> None:
    """Show aggregate counts over the hierarchy."""
    hierarchy = _load()
    table = Table(show_lines=False)
    table.add_column("metric")
    table.add_column("value")
    for key, value in hierarchy.stats.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)


def issues() -> None:
    """List validation warnings and errors."""
    hierarchy = _load()
    table = Table(show_lines=False)
    for h in ("path", "level", "message"):
        table.add_column(h)
    rows = list(hierarchy.iter_issues())
    for address, issue in rows:
        style = _LEVEL_STYLES[issue.level]
        table.add_row(str(address), f"[{style}]{issue.level.value}[/{style}]", issue.message)
    console.print(table)
    console.print(f"({len(rows)} issues)")


def show(
    path: Annotated[str, typer.Argument(help="Node path, e.g. bind/8080/listener/0/route/1.")],
) -> None:
    """Print the raw configuration of one node."""
    try:
        address = NodeAddress.parse(path)
    except HierarchyError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    node = _load().find(address)
    if node is None:
        console.print(f"[red]No node at {address}[/red]")
        raise typer.Exit(1)
    console.print_json(json.dumps(node.entity))
