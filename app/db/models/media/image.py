# app/db/models/media/image.py
from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import DateTime
from datetime import datetime
import uuid

from ..timestamps import utc_now


class ImageRename(SQLModel):
    name: str = Field(min_length=1, max_length=255)


class ImageCreate(ImageRename):
    url: str = Field(min_length=1, max_length=1024)
    storage_key: str = Field(min_length=1, max_length=512)
    folder_id: Optional[str] = None
    owner_id: str = Field(min_length=1)
    size: int = Field(ge=0)
    content_type: str = Field(max_length=100)


class Image(SQLModel, table=True):
    __tablename__ = "images"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(max_length=255, index=True)
    url: str = Field(max_length=1024)
    storage_key: str = Field(max_length=512)
    folder_id: Optional[str] = Field(foreign_key="folders.id", default=None, index=True)
    owner_id: str = Field(foreign_key="users.id", index=True)
    size: int = Field(default=0)
    content_type: str = Field(max_length=100)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    folder: Optional["Folder"] = Relationship(back_populates="images")
    owner: Optional["User"] = Relationship(back_populates="images")
