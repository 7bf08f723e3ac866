"""Tests for read-modify-write edits through a document gateway."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import AsyncMock

import pytest

from gateway_hierarchy.core.address import EditOperation, NodeAddress, NodeType, RouteKind
from gateway_hierarchy.core.edits import load_hierarchy, run_delete, run_edit
from gateway_hierarchy.core.errors import AddressNotFoundError, GatewayError, InvalidNodeError, InvariantViolationError
from gateway_hierarchy.gateway import InMemoryDocumentGateway


@pytest.mark.asyncio
async def test_load_hierarchy(in_memory_gateway: InMemoryDocumentGateway) -> None:
    tree = await load_hierarchy(in_memory_gateway)
    assert tree.stats.total_binds == 2


@pytest.mark.asyncio
async def test_run_edit_persists_and_returns_new_tree(
    in_memory_gateway: InMemoryDocumentGateway, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="gateway_hierarchy.core.edits"):
        tree = await run_edit(
            in_memory_gateway,
            NodeAddress(port=9090),
            NodeType.LISTENER,
            EditOperation.CREATE,
            {"name": "api", "protocol": "HTTP", "hostname": None},
        )
    assert in_memory_gateway.persist_count == 1
    assert in_memory_gateway.document["binds"][1]["listeners"] == [{"name": "api", "protocol": "HTTP"}]
    assert tree.stats.total_listeners == 3
    assert "Listener created at bind/9090" in caplog.text


@pytest.mark.asyncio
async def test_run_edit_applies_to_latest_document(in_memory_gateway: InMemoryDocumentGateway) -> None:
    in_memory_gateway.document["binds"].append({"port": 7000, "listeners": []})
    await run_edit(in_memory_gateway, NodeAddress(port=7000), NodeType.LISTENER, EditOperation.CREATE, {"name": "x"})
    assert [b["port"] for b in in_memory_gateway.document["binds"]] == [8080, 9090, 7000]
    assert in_memory_gateway.document["binds"][2]["listeners"] == [{"name": "x"}]


@pytest.mark.asyncio
async def test_run_edit_cleans_blank_listener_fields(in_memory_gateway: InMemoryDocumentGateway) -> None:
    await run_edit(
        in_memory_gateway,
        NodeAddress(port=8080, listener_index=0),
        NodeType.LISTENER,
        EditOperation.UPDATE,
        {"name": "web", "protocol": "HTTP", "hostname": ""},
    )
    listener = in_memory_gateway.document["binds"][0]["listeners"][0]
    assert "hostname" not in listener
    assert len(listener["routes"]) == 2


@pytest.mark.asyncio
async def test_run_edit_failure_persists_nothing(in_memory_gateway: InMemoryDocumentGateway) -> None:
    before = await in_memory_gateway.fetch()
    with pytest.raises(InvariantViolationError):
        await run_edit(
            in_memory_gateway,
            NodeAddress(port=8080, listener_index=0, route_kind=RouteKind.TCP),
            NodeType.ROUTE,
            EditOperation.CREATE,
            {"name": "t"},
        )
    assert in_memory_gateway.persist_count == 0
    assert in_memory_gateway.document == before


@pytest.mark.asyncio
async def test_run_edit_bind_without_port_persists_nothing(in_memory_gateway: InMemoryDocumentGateway) -> None:
    before = await in_memory_gateway.fetch()
    with pytest.raises(InvalidNodeError):
        await run_edit(
            in_memory_gateway, NodeAddress(port=0), NodeType.BIND, EditOperation.CREATE, {"tunnelProtocol": "Direct"}
        )
    assert in_memory_gateway.persist_count == 0
    assert in_memory_gateway.document == before
    assert [b.port for b in (await load_hierarchy(in_memory_gateway)).binds] == [8080, 9090]


@pytest.mark.asyncio
async def test_run_delete(in_memory_gateway: InMemoryDocumentGateway) -> None:
    tree = await run_delete(in_memory_gateway, NodeAddress(port=8080, listener_index=1), NodeType.LISTENER)
    assert tree.stats.total_listeners == 1
    assert tree.stats.total_routes == 2
    assert in_memory_gateway.persist_count == 1


@pytest.mark.asyncio
async def test_run_delete_missing_node(in_memory_gateway: InMemoryDocumentGateway) -> None:
    with pytest.raises(AddressNotFoundError):
        await run_delete(in_memory_gateway, NodeAddress(port=1), NodeType.BIND)
    assert in_memory_gateway.persist_count == 0


@pytest.mark.asyncio
async def test_run_edit_passes_full_document_to_persist(document: dict[str, Any]) -> None:
    gateway = AsyncMock()
    gateway.fetch.return_value = document

    await run_edit(gateway, NodeAddress(port=9090), NodeType.BIND, EditOperation.UPDATE, {"port": 9091})

    persisted = gateway.persist.call_args[0][0]
    assert [b["port"] for b in persisted["binds"]] == [8080, 9091]
    assert persisted["backends"] == document["backends"]
    assert document["binds"][1]["port"] == 9090


@pytest.mark.asyncio
async def test_gateway_errors_propagate() -> None:
    gateway = AsyncMock()
    gateway.fetch.side_effect = GatewayError("down", status=0)

    with pytest.raises(GatewayError):
        await run_delete(gateway, NodeAddress(port=1), NodeType.BIND)
    gateway.persist.assert_not_awaited()
