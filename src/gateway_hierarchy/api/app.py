from __future__ import annotations

from fastapi import FastAPI

from gateway_hierarchy.api.lifespan import lifespan
from gateway_hierarchy.api.routes.health import router as health_router
from gateway_hierarchy.api.routes.hierarchy import router as hierarchy_router
from gateway_hierarchy.api.routes.nodes import router as nodes_router
from gateway_hierarchy.api.routes.root import router as root_router
from gateway_hierarchy.api.routes.union import router as union_router


def create_app() -> FastAPI:
    app = FastAPI(
        title="Gateway Hierarchy API",
        description="View and edit the bind/listener/route/backend configuration tree.",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(root_router, include_in_schema=False)
    app.include_router(health_router, include_in_schema=False)
    app.include_router(hierarchy_router)
    app.include_router(nodes_router)
    app.include_router(union_router)

    return app
