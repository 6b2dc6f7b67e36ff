from typing import List, Optional, Protocol
from dataclasses import dataclass
from datetime import datetime


@dataclass
class FolderRef:
    id: str
    name: str
    path: str


@dataclass
class ImageDto:
    id: str
    name: str
    url: str
    storage_key: str
    folder_id: Optional[str]
    owner_id: str
    size: int
    content_type: str
    created_at: datetime
    updated_at: datetime
    folder: Optional[FolderRef] = None


class ImageRepository(Protocol):
    def list_for_owner(self, owner_id: str, folder_id: Optional[str]) -> List[ImageDto]:
        """Images of one owner in a folder, or in the root bucket when folder_id is None."""
        ...

    def search(self, owner_id: str, text: str, limit: int) -> List[ImageDto]:
        ...

    def get_for_owner(self, image_id: str, owner_id: str) -> Optional[ImageDto]:
        ...

    def name_taken(self, owner_id: str, folder_id: Optional[str], name: str, exclude_id: Optional[str] = None) -> bool:
        ...

    def create(self, owner_id: str, folder_id: Optional[str], name: str, url: str, storage_key: str, size: int, content_type: str) -> ImageDto:
        ...

    def rename(self, image_id: str, name: str) -> ImageDto:
        ...

    def delete(self, image_id: str) -> bool:
        ...
