"""FastMCP server exposing gateway-hierarchy tools."""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from gateway_hierarchy.core.address import NODE_LABELS, EditOperation, NodeAddress, NodeType
from gateway_hierarchy.core.edits import load_hierarchy, run_delete, run_edit
from gateway_hierarchy.core.errors import GatewayError, HierarchyError
from gateway_hierarchy.core.ports.gateway import DocumentGateway


def create_mcp_server(gateway: DocumentGateway) -> FastMCP:
    """Create a FastMCP server wired to the given document gateway."""

    mcp = FastMCP(
        "gateway-hierarchy",
        instructions="Inspect and edit the bind/listener/route/backend tree of a gateway configuration.",
    )

    @mcp.tool()
    async def hierarchy_stats() -> dict[str, int]:
        """Return aggregate counts over the configuration tree."""
        tree = await load_hierarchy(gateway)
        return tree.stats.model_dump()

    @mcp.tool()
    async def list_issues() -> list[dict[str, str]]:
        """List validation warnings and errors with the path of the offending node."""
        tree = await load_hierarchy(gateway)
        return [
            {"path": str(address), "level": issue.level.value, "message": issue.message}
            for address, issue in tree.iter_issues()
        ]

    @mcp.tool()
    async def show_node(path: str) -> dict[str, Any] | str:
        """Return the raw configuration of the node at ``path``."""
        try:
            address = NodeAddress.parse(path)
        except HierarchyError as exc:
            return f"Error: {exc}"
        node = (await load_hierarchy(gateway)).find(address)
        if node is None:
            return f"Error: no node at {address}"
        return {"path": str(address), "type": address.node_type.value, "value": node.entity}

    @mcp.tool()
    async def apply_edit(
        path: str,
        value: dict[str, Any],
        operation: str = "update",
        node_type: str | None = None,
        keep_keys: list[str] | None = None,
    ) -> str:
        """Create a child of ``path`` or update the node at ``path`` from a form value."""
        try:
            address = NodeAddress.parse(path)
            resolved_type = NodeType(node_type) if node_type else address.node_type
            resolved_op = EditOperation(operation)
            tree = await run_edit(gateway, address, resolved_type, resolved_op, value, set(keep_keys or []))
        except (HierarchyError, GatewayError, ValueError) as exc:
            return f"Error: {exc}"
        return (
            f"{NODE_LABELS[resolved_type]} {resolved_op.value}d successfully "
            f"({tree.stats.total_validation_errors} issues)"
        )

    @mcp.tool()
    async def apply_delete(path: str) -> str:
        """Delete the node at ``path`` and everything beneath it."""
        try:
            address = NodeAddress.parse(path)
            await run_delete(gateway, address, address.node_type)
        except (HierarchyError, GatewayError) as exc:
            return f"Error: {exc}"
        return f"{NODE_LABELS[address.node_type]} deleted"

    return mcp
