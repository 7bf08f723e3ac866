"""Read-modify-write of the configuration through a document gateway.

Each call fetches the latest document, applies exactly one structural change
to that snapshot and persists the whole result. There is no revision check:
two editors racing through these steps can overwrite each other.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Set
from typing import Any

from gateway_hierarchy.core.address import NODE_LABELS, EditOperation, NodeAddress, NodeType
from gateway_hierarchy.core.editor import apply_delete, apply_edit
from gateway_hierarchy.core.forms import cleanup_document
from gateway_hierarchy.core.hierarchy import Hierarchy, build_hierarchy
from gateway_hierarchy.core.ports.gateway import DocumentGateway

logger = logging.getLogger(__name__)


async def load_hierarchy(gateway: DocumentGateway) -> Hierarchy:
    return build_hierarchy(await gateway.fetch())


async def run_edit(
    gateway: DocumentGateway,
    address: NodeAddress,
    node_type: NodeType,
    operation: EditOperation,
    value: Mapping[str, Any] | None,
    keep_keys: Set[str] | None = None,
) -> Hierarchy:
    """Create or update one node and persist the document.

    Returns the hierarchy of the persisted document. Editor errors propagate
    before anything is persisted.
    """
    document = await gateway.fetch()
    next_document = cleanup_document(apply_edit(document, address, node_type, operation, value, keep_keys))
    await gateway.persist(next_document)
    logger.info("%s %sd at %s", NODE_LABELS[NodeType(node_type)], EditOperation(operation).value, address)
    return build_hierarchy(next_document)


async def run_delete(gateway: DocumentGateway, address: NodeAddress, node_type: NodeType) -> Hierarchy:
    """Delete one node (and everything beneath it) and persist the document."""
    document = await gateway.fetch()
    next_document = cleanup_document(apply_delete(document, address, node_type))
    await gateway.persist(next_document)
    logger.info("%s deleted at %s", NODE_LABELS[NodeType(node_type)], address)
    return build_hierarchy(next_document)
