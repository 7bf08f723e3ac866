from __future__ import annotations

from typing import Any

from fastapi import APIRouter

router = APIRouter()


@router.get("/")
async def root() -> dict[str, Any]:
    """Discovery document listing the API entry points."""
    return {
        "meta": {
            "title": "Gateway Hierarchy API",
            "description": "View and edit the bind/listener/route/backend configuration tree.",
            "version": "0.1.0",
        },
        "links": {
            "self": "/",
            "hierarchy": "/hierarchy",
            "statistics": "/hierarchy/stats",
            "issues": "/hierarchy/issues",
            "nodes": "/nodes/{path}",
            "union": "/union/resolve",
            "openapi": "/openapi.json",
            "docs": "/docs",
        },
    }
