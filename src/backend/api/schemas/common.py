"""
Response envelope shared by every JSON endpoint.
"""

from typing import Generic, Optional, TypeVar

from core.schema_base import HTTPSchemaModel

T = TypeVar("T")


class ApiResponse(HTTPSchemaModel, Generic[T]):
    """`{success, message?, data?, error?}`"""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    error: Optional[str] = None
