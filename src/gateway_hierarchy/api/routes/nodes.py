from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from gateway_hierarchy.api.dependencies import get_gateway
from gateway_hierarchy.api.routes.errors import to_http_exception
from gateway_hierarchy.api.schemas import EditRequest, EditResponse
from gateway_hierarchy.core.address import NODE_LABELS, NodeAddress
from gateway_hierarchy.core.edits import load_hierarchy, run_delete, run_edit
from gateway_hierarchy.core.errors import GatewayError, HierarchyError
from gateway_hierarchy.core.ports.gateway import DocumentGateway

router = APIRouter(prefix="/nodes", tags=["nodes"])


def _parse(path: str) -> NodeAddress:
    try:
        return NodeAddress.parse(path)
    except HierarchyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{path:path}")
async def show_node(path: str, gateway: DocumentGateway = Depends(get_gateway)) -> dict[str, Any]:
    """Return one hierarchy node, children included."""
    address = _parse(path)
    try:
        tree = await load_hierarchy(gateway)
    except GatewayError as exc:
        raise to_http_exception(exc) from exc
    node = tree.find(address)
    if node is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No node at {address}")
    return node.model_dump(mode="json")


@router.post("/{path:path}", response_model=EditResponse)
async def edit_node(
    path: str,
    body: EditRequest,
    gateway: DocumentGateway = Depends(get_gateway),
) -> EditResponse:
    """Create a child of the addressed node, or update it in place."""
    address = _parse(path)
    node_type = body.node_type or address.node_type
    try:
        tree = await run_edit(gateway, address, node_type, body.operation, body.value, set(body.keep_keys))
    except (HierarchyError, GatewayError) as exc:
        raise to_http_exception(exc) from exc
    return EditResponse(message=f"{NODE_LABELS[node_type]} {body.operation.value}d successfully", stats=tree.stats)


@router.delete("/{path:path}", response_model=EditResponse)
async def delete_node(path: str, gateway: DocumentGateway = Depends(get_gateway)) -> EditResponse:
    address = _parse(path)
    try:
        tree = await run_delete(gateway, address, address.node_type)
    except (HierarchyError, GatewayError) as exc:
        raise to_http_exception(exc) from exc
    return EditResponse(message=f"{NODE_LABELS[address.node_type]} deleted", stats=tree.stats)
