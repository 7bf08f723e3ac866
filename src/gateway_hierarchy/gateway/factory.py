import os

from gateway_hierarchy.core.ports.gateway import DocumentGateway
from gateway_hierarchy.core.ports.schemas import SchemaSource
from gateway_hierarchy.gateway.file import DirectorySchemaSource, FileDocumentGateway
from gateway_hierarchy.gateway.http import HttpDocumentGateway


def get_gateway() -> DocumentGateway:
    config_file = os.getenv("GATEWAY_CONFIG_FILE")
    if config_file:
        return FileDocumentGateway(config_file)
    return HttpDocumentGateway(
        os.getenv("GATEWAY_URL", "http://localhost:15000"),
        timeout=float(os.getenv("GATEWAY_TIMEOUT", "10")),
    )


def get_schema_source() -> SchemaSource:
    return DirectorySchemaSource(os.getenv("GATEWAY_SCHEMA_DIR", "schema-forms"))
