from typing import Optional, Protocol

from .image_repo import FolderRef


class FolderRepository(Protocol):
    def get_for_owner(self, folder_id: str, owner_id: str) -> Optional[FolderRef]:
        ...
