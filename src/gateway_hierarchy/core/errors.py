"""Typed failures raised by the structural editor and address parsing."""

from __future__ import annotations


class HierarchyError(Exception):
    """Base class for caller-visible hierarchy edit failures."""


class AddressNotFoundError(HierarchyError):
    """Raised when an address does not resolve to an existing entity."""


class InvariantViolationError(HierarchyError):
    """Raised when an edit would break the HTTP/TCP route exclusion on a listener."""


class GatewayError(Exception):
    """Raised by document gateways when the backing store cannot be read or written."""

    def __init__(self, message: str, status: int | None = None, configuration_error: bool = False) -> None:
        super().__init__(message)
        self.status = status
        self.configuration_error = configuration_error


class InvalidNodeError(HierarchyError):
    """Raised when an edited value cannot be placed in the document, such as a bind without a port."""
