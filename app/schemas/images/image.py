# app/schemas/images/image.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class FolderSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    path: str


class ImageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    url: str = Field(..., description="Public URL of the stored object")
    storage_key: str = Field(..., description="Object storage key used for deletion")
    folder: Optional[FolderSummary] = Field(None, description="Containing folder, null for the root bucket")
    owner_id: str
    size: int
    content_type: str
    created_at: datetime
    updated_at: datetime


class ImageRenameRequest(BaseModel):
    name: Optional[str] = None
