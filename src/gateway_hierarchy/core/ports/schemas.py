from typing import Any, Protocol

from gateway_hierarchy.core.address import SchemaCategory


class SchemaSource(Protocol):
    async def load_schema(self, category: SchemaCategory, type_name: str) -> dict[str, Any]: ...
