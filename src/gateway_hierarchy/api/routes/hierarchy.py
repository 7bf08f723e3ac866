from __future__ import annotations

from fastapi import APIRouter, Depends

from gateway_hierarchy.api.dependencies import get_gateway
from gateway_hierarchy.api.routes.errors import to_http_exception
from gateway_hierarchy.api.schemas import IssueEntry
from gateway_hierarchy.core.edits import load_hierarchy
from gateway_hierarchy.core.errors import GatewayError
from gateway_hierarchy.core.hierarchy import Hierarchy, HierarchyStats
from gateway_hierarchy.core.ports.gateway import DocumentGateway

router = APIRouter(prefix="/hierarchy", tags=["hierarchy"])


async def _load(gateway: DocumentGateway) -> Hierarchy:
    try:
        return await load_hierarchy(gateway)
    except GatewayError as exc:
        raise to_http_exception(exc) from exc


@router.get("", response_model=Hierarchy)
async def hierarchy(gateway: DocumentGateway = Depends(get_gateway)) -> Hierarchy:
    """The full tree with inherited context, diagnostics and statistics."""
    return await _load(gateway)


@router.get("/stats", response_model=HierarchyStats)
async def statistics(gateway: DocumentGateway = Depends(get_gateway)) -> HierarchyStats:
    return (await _load(gateway)).stats


@router.get("/issues", response_model=list[IssueEntry])
async def issues(gateway: DocumentGateway = Depends(get_gateway)) -> list[IssueEntry]:
    tree = await _load(gateway)
    return [
        IssueEntry(path=address.to_path(), level=issue.level, message=issue.message)
        for address, issue in tree.iter_issues()
    ]
