# app/db/models/users/user.py
from typing import Optional, List
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import DateTime
from datetime import datetime
import uuid

from ..timestamps import utc_now

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(max_length=100)
    email: Optional[str] = Field(max_length=100, default=None, unique=True, index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    # Relationships
    folders: List["Folder"] = Relationship(back_populates="owner")
    images: List["Image"] = Relationship(back_populates="owner")
