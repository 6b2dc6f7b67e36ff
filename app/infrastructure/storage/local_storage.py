import os
import logging
from typing import Optional

from ...core.config import settings
from ...exceptions import StorageError
from ...application.ports.storage_repo import ObjectStorage, StoredObject

logger = logging.getLogger(__name__)


class LocalObjectStorage(ObjectStorage):
    def __init__(self, upload_dir: Optional[str] = None, base_url: Optional[str] = None) -> None:
        self.upload_dir = os.path.abspath(upload_dir or settings.UPLOAD_DIR)
        self.base_url = (base_url or settings.BASE_URL).rstrip("/")

    def _path_for(self, storage_key: str) -> str:
        path = os.path.abspath(os.path.join(self.upload_dir, storage_key))
        if os.path.commonpath([path, self.upload_dir]) != self.upload_dir:
            raise StorageError(f"Storage key escapes upload directory: {storage_key}")
        return path

    def upload(self, data: bytes, folder: str, public_id: str, content_type: str) -> StoredObject:
        storage_key = f"{folder}/{public_id}" if folder else public_id
        path = self._path_for(storage_key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Could not write {storage_key}: {e}") from e
        logger.info(f"Stored {len(data)} bytes at {storage_key}")
        return StoredObject(url=f"{self.base_url}/uploads/{storage_key}", storage_key=storage_key)

    def delete(self, storage_key: str) -> None:
        path = self._path_for(storage_key)
        try:
            os.remove(path)
        except OSError as e:
            raise StorageError(f"Could not delete {storage_key}: {e}") from e
