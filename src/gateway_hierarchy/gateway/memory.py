import copy
from typing import Any

from gateway_hierarchy.core.address import SchemaCategory


class InMemoryDocumentGateway:
    def __init__(self, document: dict[str, Any] | None = None) -> None:
        self.document: dict[str, Any] = copy.deepcopy(document or {})
        self.persist_count = 0

    async def fetch(self) -> dict[str, Any]:
        return copy.deepcopy(self.document)

    async def persist(self, document: dict[str, Any]) -> None:
        self.document = copy.deepcopy(document)
        self.persist_count += 1

    async def ping(self) -> bool:
        return True

    async def dispose(self) -> None:
        pass


class InMemorySchemaSource:
    """Schema fragments keyed by type name, e.g. ``LocalListener``."""

    def __init__(self, schemas: dict[str, dict[str, Any]] | None = None) -> None:
        self.schemas: dict[str, dict[str, Any]] = dict(schemas or {})

    async def load_schema(self, category: SchemaCategory, type_name: str) -> dict[str, Any]:
        try:
            return copy.deepcopy(self.schemas[type_name])
        except KeyError:
            raise FileNotFoundError(f"Schema not found: {category}/{type_name}") from None
