import json
import logging
from pathlib import Path
from typing import Any

from gateway_hierarchy.core.address import SCHEMA_FOLDER_MAP, SchemaCategory
from gateway_hierarchy.core.errors import GatewayError

logger = logging.getLogger(__name__)


class FileDocumentGateway:
    """Keep the whole document in one JSON file, replaced atomically on persist."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    async def fetch(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise GatewayError(f"Invalid JSON in {self._path}: {exc}") from exc
        if not isinstance(document, dict):
            raise GatewayError(f"Expected a JSON object in {self._path}")
        return document

    async def persist(self, document: dict[str, Any]) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
        tmp_path.replace(self._path)
        logger.info("Wrote configuration to %s", self._path)

    async def ping(self) -> bool:
        return self._path.parent.is_dir()

    async def dispose(self) -> None:
        pass


class DirectorySchemaSource:
    """Load generated form schemas laid out as ``<root>/<folder>/<Type>.json``."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    async def load_schema(self, category: SchemaCategory, type_name: str) -> dict[str, Any]:
        schema_path = self._directory / SCHEMA_FOLDER_MAP[SchemaCategory(category)] / f"{type_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {schema_path}")
        schema: dict[str, Any] = json.loads(schema_path.read_text(encoding="utf-8"))
        return schema
