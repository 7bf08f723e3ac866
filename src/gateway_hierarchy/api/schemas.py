from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gateway_hierarchy.core.address import EditOperation, NodeType
from gateway_hierarchy.core.hierarchy import HierarchyStats
from gateway_hierarchy.core.validation import IssueLevel


class HealthResponse(BaseModel):
    status: str = "ok"


class ReadinessResponse(BaseModel):
    status: str = "ok"
    gateway: str = "up"


class EditRequest(BaseModel):
    """Body of ``POST /nodes/{path}``: create a child of the addressed node, or update it."""

    node_type: NodeType | None = None
    operation: EditOperation = EditOperation.UPDATE
    value: dict[str, Any] = {}
    keep_keys: list[str] = []


class EditResponse(BaseModel):
    message: str
    stats: HierarchyStats


class IssueEntry(BaseModel):
    path: str
    level: IssueLevel
    message: str


class UnionResolveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fragment: dict[str, Any] = Field(alias="schema")
    value: Any = None
    selection: bool | int | None = None
    root: dict[str, Any] | None = None
