from __future__ import annotations

from collections.abc import AsyncIterator

from gateway_hierarchy.core.ports.gateway import DocumentGateway
from gateway_hierarchy.gateway.factory import get_gateway as _make_gateway

_gateway: DocumentGateway | None = None


async def get_gateway() -> AsyncIterator[DocumentGateway]:
    """Yield a ``DocumentGateway`` instance, creating it lazily on first call."""
    global _gateway  # noqa: PLW0603
    if _gateway is None:
        _gateway = _make_gateway()
    yield _gateway


async def shutdown_gateway() -> None:
    global _gateway  # noqa: PLW0603
    if _gateway is not None:
        await _gateway.dispose()
        _gateway = None
