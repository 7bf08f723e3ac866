from typing import Any, Protocol


class DocumentGateway(Protocol):
    async def fetch(self) -> dict[str, Any]: ...

    async def persist(self, document: dict[str, Any]) -> None: ...

    async def ping(self) -> bool: ...

    async def dispose(self) -> None: ...
