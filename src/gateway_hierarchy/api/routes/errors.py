from __future__ import annotations

from fastapi import HTTPException, status

from gateway_hierarchy.core.errors import (
    AddressNotFoundError,
    GatewayError,
    InvalidNodeError,
    InvariantViolationError,
)


def to_http_exception(exc: Exception) -> HTTPException:
    """Map a core or gateway failure onto an HTTP status."""
    if isinstance(exc, AddressNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, InvariantViolationError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, InvalidNodeError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, GatewayError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
