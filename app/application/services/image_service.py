import re
import time
import logging
from typing import Callable, List, Optional
from dataclasses import dataclass, field
from fastapi import UploadFile
from pydantic import ValidationError

from ..ports.image_repo import ImageRepository, ImageDto
from ..ports.folder_repo import FolderRepository
from ..ports.storage_repo import ObjectStorage
from ..ports.audit_logger import AuditLogger
from .upload_gate import check_image_upload, upload_size
from ...core.config import ImageUploadConfig
from ...exceptions import (
    ValidationFailed,
    NotFound,
    Conflict,
    UploadFailed,
    join_error_messages,
)

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50
_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def storage_folder_for(owner_id: str) -> str:
    return f"users/{owner_id}/images"


def placement_id(folder_id: str, name: str, timestamp_ms: int) -> str:
    return f"{folder_id}_{timestamp_ms}_{_UNSAFE_NAME_CHARS.sub('_', name.strip())}"


def _clean_name(name: Optional[str]) -> str:
    if not name or not name.strip():
        raise ValidationFailed("Image name is required")
    return name.strip()


@dataclass
class ImageService:
    image_repo: ImageRepository
    folder_repo: FolderRepository
    storage: ObjectStorage
    audit: AuditLogger
    config: ImageUploadConfig = field(default_factory=ImageUploadConfig)
    clock: Callable[[], float] = time.time

    def _require_folder(self, owner_id: str, folder_id: str) -> None:
        if not self.folder_repo.get_for_owner(folder_id, owner_id):
            raise NotFound("Folder not found")

    def list_images(self, owner_id: str, folder_id: Optional[str] = None) -> List[ImageDto]:
        if folder_id:
            self._require_folder(owner_id, folder_id)
        return self.image_repo.list_for_owner(owner_id, folder_id or None)

    def search_images(self, owner_id: str, query: Optional[str]) -> List[ImageDto]:
        text = (query or "").strip()
        if not text:
            return []
        return self.image_repo.search(owner_id, text, SEARCH_LIMIT)

    def upload_image(self, owner_id: str, name: Optional[str], folder_id: Optional[str], upload: Optional[UploadFile]) -> ImageDto:
        name = _clean_name(name)
        if not folder_id:
            raise ValidationFailed("Folder ID is required")
        if upload is None:
            raise ValidationFailed("Image file is required")
        check_image_upload(upload, self.config)

        self._require_folder(owner_id, folder_id)

        if self.image_repo.name_taken(owner_id, folder_id, name):
            raise Conflict()

        size = upload_size(upload)
        data = upload.file.read()
        content_type = upload.content_type or "application/octet-stream"
        public_id = placement_id(folder_id, name, int(self.clock() * 1000))

        try:
            stored = self.storage.upload(data, storage_folder_for(owner_id), public_id, content_type)
        except Exception as e:
            logger.error(f"Object storage upload error: {e}")
            raise UploadFailed()

        try:
            image = self.image_repo.create(
                owner_id=owner_id,
                folder_id=folder_id,
                name=name,
                url=stored.url,
                storage_key=stored.storage_key,
                size=size,
                content_type=content_type,
            )
        except ValidationError as e:
            self._discard_stored(stored.storage_key)
            raise ValidationFailed(join_error_messages(e.errors()))
        except Exception:
            self._discard_stored(stored.storage_key)
            raise

        self.audit.log("image_upload", owner_id, image.id, details={"folder_id": folder_id, "size": size})
        return image

    def rename_image(self, owner_id: str, image_id: str, name: Optional[str]) -> ImageDto:
        name = _clean_name(name)

        image = self.image_repo.get_for_owner(image_id, owner_id)
        if not image:
            raise NotFound("Image not found")

        # folder comes from the stored record; rename never moves an image
        if self.image_repo.name_taken(owner_id, image.folder_id, name, exclude_id=image.id):
            raise Conflict()

        try:
            renamed = self.image_repo.rename(image.id, name)
        except ValidationError as e:
            raise ValidationFailed(join_error_messages(e.errors()))
        self.audit.log("image_rename", owner_id, image.id, details={"from": image.name, "to": name})
        return renamed

    def delete_image(self, owner_id: str, image_id: str) -> str:
        image = self.image_repo.get_for_owner(image_id, owner_id)
        if not image:
            raise NotFound("Image not found")

        storage_ok = True
        try:
            self.storage.delete(image.storage_key)
        except Exception as e:
            storage_ok = False
            logger.error(f"Object storage delete error for {image.storage_key}: {e}")

        self.image_repo.delete(image.id)
        self.audit.log("image_delete", owner_id, image.id, details={"storage_deleted": storage_ok})
        return "Image deleted successfully"

    def _discard_stored(self, storage_key: str) -> None:
        try:
            self.storage.delete(storage_key)
        except Exception as e:
            logger.error(f"Failed to discard stored object {storage_key}: {e}")
