"""
Client configuration schemas.
"""

from core.schema_base import HTTPSchemaModel


class BackendUrlData(HTTPSchemaModel):
    backend_url: str
    auto_detected: bool
