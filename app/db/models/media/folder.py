# app/db/models/media/folder.py
from typing import Optional, List
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import DateTime
from datetime import datetime
import uuid

from ..timestamps import utc_now

class Folder(SQLModel, table=True):
    __tablename__ = "folders"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(max_length=255)
    path: str = Field(max_length=1024)
    owner_id: str = Field(foreign_key="users.id", index=True)
    parent_id: Optional[str] = Field(foreign_key="folders.id", default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    owner: Optional["User"] = Relationship(back_populates="folders")
    images: List["Image"] = Relationship(back_populates="folder")
