from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from .....db.models import Image, ImageCreate, ImageRename, Folder
from .....db.models.timestamps import utc_now
from .....application.ports.image_repo import ImageRepository, ImageDto, FolderRef


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlImageRepository(ImageRepository):
    def __init__(self, session: Session):
        self.session = session

    def _folder_ref(self, folder: Optional[Folder]) -> Optional[FolderRef]:
        if folder is None:
            return None
        return FolderRef(id=folder.id, name=folder.name, path=folder.path)

    def _to_dto(self, img: Image) -> ImageDto:
        return ImageDto(
            id=img.id,
            name=img.name,
            url=img.url,
            storage_key=img.storage_key,
            folder_id=img.folder_id,
            owner_id=img.owner_id,
            size=img.size,
            content_type=img.content_type,
            created_at=img.created_at,
            updated_at=img.updated_at,
            folder=self._folder_ref(img.folder),
        )

    def _query(self, owner_id: str):
        return (
            select(Image)
            .where(Image.owner_id == owner_id)
            .options(selectinload(Image.folder))
        )

    def list_for_owner(self, owner_id: str, folder_id: Optional[str]) -> List[ImageDto]:
        stmt = self._query(owner_id)
        if folder_id:
            stmt = stmt.where(Image.folder_id == folder_id)
        else:
            stmt = stmt.where(Image.folder_id.is_(None))
        rows = self.session.exec(stmt.order_by(Image.name)).all()
        return [self._to_dto(r) for r in rows]

    def search(self, owner_id: str, text: str, limit: int) -> List[ImageDto]:
        pattern = f"%{_escape_like(text)}%"
        rows = self.session.exec(
            self._query(owner_id)
            .where(func.lower(Image.name).like(func.lower(pattern), escape="\\"))
            .order_by(Image.name)
            .limit(limit)
        ).all()
        return [self._to_dto(r) for r in rows]

    def _get(self, image_id: str, owner_id: str) -> Optional[Image]:
        return self.session.exec(self._query(owner_id).where(Image.id == image_id)).first()

    def get_for_owner(self, image_id: str, owner_id: str) -> Optional[ImageDto]:
        img = self._get(image_id, owner_id)
        return self._to_dto(img) if img else None

    def name_taken(self, owner_id: str, folder_id: Optional[str], name: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(Image.id).where(Image.owner_id == owner_id).where(Image.name == name)
        if folder_id:
            stmt = stmt.where(Image.folder_id == folder_id)
        else:
            stmt = stmt.where(Image.folder_id.is_(None))
        if exclude_id:
            stmt = stmt.where(Image.id != exclude_id)
        return self.session.exec(stmt).first() is not None

    def create(self, owner_id: str, folder_id: Optional[str], name: str, url: str, storage_key: str, size: int, content_type: str) -> ImageDto:
        payload = ImageCreate.model_validate({
            "name": name,
            "url": url,
            "storage_key": storage_key,
            "folder_id": folder_id,
            "owner_id": owner_id,
            "size": size,
            "content_type": content_type,
        })
        img = Image.model_validate(payload)
        self.session.add(img)
        self.session.commit()
        self.session.refresh(img)
        return self._to_dto(img)

    def rename(self, image_id: str, name: str) -> ImageDto:
        payload = ImageRename.model_validate({"name": name})
        img = self.session.get(Image, image_id)
        img.name = payload.name
        img.updated_at = utc_now()
        self.session.add(img)
        self.session.commit()
        self.session.refresh(img)
        return self._to_dto(img)

    def delete(self, image_id: str) -> bool:
        img = self.session.get(Image, image_id)
        if not img:
            return False
        self.session.delete(img)
        self.session.commit()
        return True
