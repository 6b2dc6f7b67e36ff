from functools import lru_cache

from ...core.config import settings
from ...application.ports.storage_repo import ObjectStorage
from .local_storage import LocalObjectStorage
from .s3_storage import S3ObjectStorage


@lru_cache()
def get_object_storage() -> ObjectStorage:
    storage_backend = settings.STORAGE_BACKEND.lower()

    if storage_backend == "local":
        return LocalObjectStorage()
    elif storage_backend == "s3":
        return S3ObjectStorage()
    else:
        raise RuntimeError(
            f'Invalid STORAGE_BACKEND value "{settings.STORAGE_BACKEND}": expected either "local" or "s3".'
        )


__all__ = ["LocalObjectStorage", "S3ObjectStorage", "get_object_storage"]
