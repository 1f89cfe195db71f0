"""
Jojárts API — Image Request/Response Schemas
==============================================

What:  API contract for the gallery endpoints.
Why:   Routes speak these models; the ORM Image never leaves the service
       layer.

Update semantics:
    ImageUpdate is applied with model_dump(exclude_unset=True), so a field
    the client leaves out keeps its stored value. Sending "url": "" or
    "url": null is an error; sending "label": null stores "".
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ImageCreate(BaseModel):
    """
    Body of POST /api/images.

    url is Optional here so that a missing URL reaches ImageCatalog, which
    answers with "Hiányzó kép URL." (400) rather than a schema error.
    """
    url: Optional[str] = Field(default=None, description="URL returned by the image host")
    label: Optional[str] = Field(default="", description="Caption; defaults to empty")


class ImageUpdate(BaseModel):
    """Body of PUT /api/images/{id}. Omitted fields are left unchanged."""
    url: Optional[str] = Field(default=None, description="Replacement image URL")
    label: Optional[str] = Field(default=None, description="Replacement caption")


class PhotoRecord(BaseModel):
    """
    What:  Full view of a catalog entry as returned by ImageCatalog.
    Who:   Routes narrow it to ImageResponse through response_model.
    """
    id: str = Field(description="Opaque identifier")
    url: str
    label: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        """ORM rows carry uuid.UUID; the API exposes ids as strings."""
        if isinstance(v, uuid.UUID):
            return str(v)
        return v


class ImageResponse(BaseModel):
    """What the gallery and admin screens consume: id, url, label."""
    id: str
    url: str
    label: str


class ImageDeleteResponse(BaseModel):
    id: str = Field(description="Identifier of the deleted image")
