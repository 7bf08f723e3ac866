from gateway_hierarchy.gateway.factory import get_gateway, get_schema_source
from gateway_hierarchy.gateway.file import DirectorySchemaSource, FileDocumentGateway
from gateway_hierarchy.gateway.http import HttpDocumentGateway
from gateway_hierarchy.gateway.memory import InMemoryDocumentGateway, InMemorySchemaSource

__all__ = [
    "DirectorySchemaSource",
    "FileDocumentGateway",
    "HttpDocumentGateway",
    "InMemoryDocumentGateway",
    "InMemorySchemaSource",
    "get_gateway",
    "get_schema_source",
]
