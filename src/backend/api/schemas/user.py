"""
User profile and administration schemas.
"""

from typing import Optional

from pydantic import Field, field_validator

from core.schema_base import RequestSchemaModel, reject_null


class ProfileUpdate(RequestSchemaModel):
    """Fields a user may change on their own profile. Omitted fields are left as-is."""

    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    phone_number: Optional[str] = Field(default=None, max_length=30)
    profile_picture: Optional[str] = None

    @field_validator("first_name", "last_name", "display_name")
    @classmethod
    def reject_null_names(cls, v):
        return reject_null(v)


class UserActiveUpdate(RequestSchemaModel):
    is_active: bool
