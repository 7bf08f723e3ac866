"""Shared fixtures and helpers for tests."""

import copy
from pathlib import Path
from typing import Any

import pytest

from gateway_hierarchy.gateway import InMemoryDocumentGateway, InMemorySchemaSource

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Sample configuration
# ---------------------------------------------------------------------------


def make_document() -> dict[str, Any]:
    """Two binds: 8080 with an HTTP and a TCP listener, 9090 empty."""
    return {
        "binds": [
            {
                "port": 8080,
                "listeners": [
                    {
                        "name": "web",
                        "protocol": "HTTP",
                        "hostname": "example.com",
                        "routes": [
                            {
                                "name": "root",
                                "matches": [{"path": {"pathPrefix": "/"}}],
                                "backends": [{"host": "127.0.0.1:9000"}, {"backend": "shared"}],
                            },
                            {"name": "svc", "backends": [{"service": {"name": "svc", "port": 80}}]},
                        ],
                    },
                    {
                        "name": "db",
                        "protocol": "TCP",
                        "tcpRoutes": [{"name": "pg", "backends": [{"host": "10.0.0.1:5432"}]}],
                    },
                ],
            },
            {"port": 9090, "listeners": []},
        ],
        "backends": [{"name": "shared", "host": "10.0.0.2:80"}],
        "policies": [{"name": "cors"}],
    }


# Form schemas as produced by the form generator: refs kept, $defs embedded.
BACKEND_SCHEMA: dict[str, Any] = {
    "title": "LocalRouteBackend",
    "type": "object",
    "properties": {
        "weight": {"type": "integer", "default": 1},
        "target": {
            "oneOf": [
                {
                    "title": "Host",
                    "type": "object",
                    "properties": {"host": {"type": "string"}},
                    "required": ["host"],
                    "additionalProperties": False,
                },
                {
                    "title": "Service",
                    "type": "object",
                    "properties": {"service": {"$ref": "#/$defs/Service"}},
                    "required": ["service"],
                    "additionalProperties": False,
                },
            ]
        },
        "policies": {"anyOf": [{"$ref": "#/$defs/Policies"}, {"type": "null"}]},
    },
    "$defs": {
        "Service": {
            "type": "object",
            "properties": {"name": {"type": "string"}, "port": {"type": "integer", "default": 80}},
            "required": ["name"],
        },
        "Policies": {
            "type": "object",
            "properties": {"timeout": {"type": "string", "default": "10s"}},
        },
    },
}

LISTENER_SCHEMA: dict[str, Any] = {
    "title": "LocalListener",
    "type": "object",
    "properties": {
        "name": {"type": ["string", "null"]},
        "hostname": {"type": ["string", "null"]},
        "protocol": {"type": "string", "enum": ["HTTP", "HTTPS", "TLS", "TCP", "HBONE"], "default": "HTTP"},
        "routes": {"type": ["array", "null"]},
        "tcpRoutes": {"type": ["array", "null"]},
    },
    "required": ["protocol", "routes"],
}


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def document() -> dict[str, Any]:
    return make_document()


@pytest.fixture
def in_memory_gateway() -> InMemoryDocumentGateway:
    return InMemoryDocumentGateway(make_document())


@pytest.fixture
def schema_source() -> InMemorySchemaSource:
    return InMemorySchemaSource(
        {
            "LocalListener": LISTENER_SCHEMA,
            "LocalRouteBackend": BACKEND_SCHEMA,
            "LocalTCPRouteBackend": BACKEND_SCHEMA,
        }
    )


@pytest.fixture
def backend_schema() -> dict[str, Any]:
    return copy.deepcopy(BACKEND_SCHEMA)


@pytest.fixture
def listener_schema() -> dict[str, Any]:
    return copy.deepcopy(LISTENER_SCHEMA)
