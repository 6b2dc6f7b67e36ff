from typing import Optional
from sqlmodel import Session, select

from .....db.models import Folder
from .....application.ports.folder_repo import FolderRepository
from .....application.ports.image_repo import FolderRef


class SqlFolderRepository(FolderRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_for_owner(self, folder_id: str, owner_id: str) -> Optional[FolderRef]:
        folder = self.session.exec(
            select(Folder)
            .where(Folder.id == folder_id)
            .where(Folder.owner_id == owner_id)
        ).first()
        if not folder:
            return None
        return FolderRef(id=folder.id, name=folder.name, path=folder.path)
