import asyncio
import json
from typing import Annotated, Any

import typer
from rich.console import Console

from gateway_hierarchy.core.address import NODE_LABELS, EditOperation, NodeAddress, NodeType
from gateway_hierarchy.core.edits import run_delete, run_edit
from gateway_hierarchy.core.errors import GatewayError, HierarchyError
from gateway_hierarchy.core.hierarchy import Hierarchy
from gateway_hierarchy.core.ports.gateway import DocumentGateway

console = Console()


def _get_gateway() -> "DocumentGateway":
    from gateway_hierarchy.gateway.factory import get_gateway

    return get_gateway()


def _parse_address(path: str) -> NodeAddress:
    try:
        return NodeAddress.parse(path)
    except HierarchyError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc


def _parse_value(value: str) -> dict[str, Any]:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON value: {exc}[/red]")
        raise typer.Exit(1) from exc
    if not isinstance(parsed, dict):
        console.print("[red]The value must be a JSON object.[/red]")
        raise typer.Exit(1)
    return parsed


def _print_stats(hierarchy: Hierarchy) -> None:
    s = hierarchy.stats
    console.print(
        f"{s.total_binds} binds, {s.total_listeners} listeners, {s.total_routes} routes, "
        f"{s.total_validation_errors} issues"
    )


def edit(
    path: Annotated[str, typer.Argument(help="Node path; for --create, the parent path.")],
    value: Annotated[str, typer.Option(help="Form value as a JSON object.")],
    type: Annotated[NodeType | None, typer.Option("--type", help="Node type; defaults to the path's depth.")] = None,
    create: Annotated[bool, typer.Option("--create/--update", help="Create a new child or update in place.")] = False,
    keep: Annotated[list[str] | None, typer.Option(help="Top-level key whose empty list must be kept.")] = None,
) -> None:
    """Create or update a node from a JSON form value."""
    address = _parse_address(path)
    node_type = type or address.node_type
    operation = EditOperation.CREATE if create else EditOperation.UPDATE
    form_value = _parse_value(value)
    gateway = _get_gateway()

    async def _run() -> Hierarchy:
        try:
            return await run_edit(gateway, address, node_type, operation, form_value, set(keep or []))
        finally:
            await gateway.dispose()

    try:
        hierarchy = asyncio.run(_run())
    except (HierarchyError, GatewayError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    console.print(f"[green]{NODE_LABELS[node_type]} {operation.value}d[/green] at {address}")
    _print_stats(hierarchy)


def delete(
    path: Annotated[str, typer.Argument(help="Path of the node to delete.")],
) -> None:
    """Delete a node and everything beneath it."""
    address = _parse_address(path)
    gateway = _get_gateway()

    async def _run() -> Hierarchy:
        try:
            return await run_delete(gateway, address, address.node_type)
        finally:
            await gateway.dispose()

    try:
        hierarchy = asyncio.run(_run())
    except (HierarchyError, GatewayError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    console.print(f"[green]{NODE_LABELS[address.node_type]} deleted[/green] at {address}")
    _print_stats(hierarchy)
