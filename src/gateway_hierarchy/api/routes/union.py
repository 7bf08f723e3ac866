from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from gateway_hierarchy.api.schemas import UnionResolveRequest
from gateway_hierarchy.core.union import UnionResolution, resolve_union_field

router = APIRouter(prefix="/union", tags=["forms"])


@router.post("/resolve", response_model=UnionResolution)
async def resolve(body: UnionResolveRequest) -> UnionResolution:
    """Mount a union-typed field, or apply one branch selection or toggle to it."""
    try:
        return resolve_union_field(body.fragment, body.value, body.selection, body.root)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
