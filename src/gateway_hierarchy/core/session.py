"""A single open edit of one hierarchy node.

The session loads the node's form schema, hides child collections, mounts a
``UnionField`` for every union-typed top-level property and tracks the
active option of each exclusive group. Its state lives only as long as the
edit; ``submit`` and ``delete`` go through the read-modify-write helpers.
"""

from __future__ import annotations

import copy
from typing import Any

from gateway_hierarchy.core.address import (
    SCHEMA_TYPE_MAP,
    EditOperation,
    NodeAddress,
    NodeType,
    category_for,
)
from gateway_hierarchy.core.edits import run_delete, run_edit
from gateway_hierarchy.core.errors import AddressNotFoundError
from gateway_hierarchy.core.forms import (
    ExclusiveGroup,
    detect_active_key,
    exclusive_groups,
    form_initial_data,
    form_schema,
    keep_keys_for,
    switch_group_key,
)
from gateway_hierarchy.core.hierarchy import Hierarchy, build_hierarchy
from gateway_hierarchy.core.ports.gateway import DocumentGateway
from gateway_hierarchy.core.ports.schemas import SchemaSource
from gateway_hierarchy.core.union import UnionField, is_union_schema


class EditSession:
    def __init__(
        self,
        gateway: DocumentGateway,
        address: NodeAddress,
        node_type: NodeType,
        operation: EditOperation,
        initial_data: dict[str, Any] | None = None,
    ) -> None:
        self.gateway = gateway
        self.address = address
        self.node_type = NodeType(node_type)
        self.operation = EditOperation(operation)
        self.category = category_for(self.node_type, address.route_kind)
        self.schema: dict[str, Any] = {}
        self.form_data: dict[str, Any] = form_initial_data(initial_data, self.category)
        self.groups: tuple[ExclusiveGroup, ...] = exclusive_groups(self.category)
        self.active_keys: dict[str, str] = {g.group_label: detect_active_key(g, initial_data) for g in self.groups}
        self.union_fields: dict[str, UnionField] = {}

    @property
    def is_new(self) -> bool:
        return self.operation == EditOperation.CREATE

    @property
    def keep_keys(self) -> frozenset[str]:
        return keep_keys_for(self.groups, self.active_keys)

    @classmethod
    async def open(
        cls,
        gateway: DocumentGateway,
        schema_source: SchemaSource,
        address: NodeAddress,
        node_type: NodeType | None = None,
        operation: EditOperation = EditOperation.UPDATE,
    ) -> EditSession:
        """Start editing the node at ``address``, or a new child of it for ``create``."""
        node_type = NodeType(node_type) if node_type is not None else address.node_type
        initial_data: dict[str, Any] | None = None
        if operation == EditOperation.UPDATE:
            node = build_hierarchy(await gateway.fetch()).find(address)
            if node is None:
                raise AddressNotFoundError(f"No node at {address}")
            initial_data = copy.deepcopy(node.entity) if isinstance(node.entity, dict) else {}

        session = cls(gateway, address, node_type, operation, initial_data)
        raw_schema = await schema_source.load_schema(session.category, SCHEMA_TYPE_MAP[session.category])
        session.mount_schema(raw_schema)
        return session

    def mount_schema(self, raw_schema: dict[str, Any]) -> None:
        self.schema = form_schema(raw_schema, self.category)
        for key, prop in (self.schema.get("properties") or {}).items():
            if not is_union_schema(prop, raw_schema):
                continue
            union_field = UnionField(prop, self.form_data.get(key), root=raw_schema)
            value = union_field.mount()
            if value is not None:
                self.form_data[key] = value
            self.union_fields[key] = union_field

    def set_field(self, key: str, value: Any) -> None:
        self.form_data[key] = value
        if key in self.union_fields:
            self.union_fields[key].value = value

    def select_alternative(self, key: str, index: int) -> Any:
        union_field = self.union_fields[key]
        self.form_data[key] = union_field.select(index)
        return self.form_data[key]

    def toggle_field(self, key: str, enabled: bool) -> Any:
        union_field = self.union_fields[key]
        self.form_data[key] = union_field.toggle(enabled)
        return self.form_data[key]

    def switch_group(self, group_label: str, new_key: str) -> None:
        group = next(g for g in self.groups if g.group_label == group_label)
        self.active_keys[group_label] = new_key
        self.form_data = switch_group_key(self.form_data, group, new_key)

    async def submit(self, form_data: dict[str, Any] | None = None) -> Hierarchy:
        value = form_data if form_data is not None else self.form_data
        return await run_edit(self.gateway, self.address, self.node_type, self.operation, value, self.keep_keys)

    async def delete(self) -> Hierarchy:
        if self.is_new:
            raise AddressNotFoundError("Nothing to delete: the node has not been created yet")
        return await run_delete(self.gateway, self.address, self.node_type)
