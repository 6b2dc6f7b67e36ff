from typing import Iterable, Optional
from fastapi import UploadFile

from ...core.config import ImageUploadConfig
from ...exceptions import FileTypeError, SizeLimitError


def _type_label(content_type: str) -> str:
    return content_type.split("/")[-1].upper()


def file_type_message(allowed_types: Iterable[str]) -> str:
    labels = [_type_label(t) for t in allowed_types]
    if len(labels) > 1:
        listed = f"{', '.join(labels[:-1])} and {labels[-1]}"
    else:
        listed = "".join(labels)
    return f"Invalid file type. Only {listed} images are allowed."


def size_limit_message(max_file_size: int) -> str:
    megabytes = f"{max_file_size / 1_000_000:.1f}".rstrip("0").rstrip(".")
    return f"File size too large. Maximum size is {megabytes}MB."


def upload_size(upload: UploadFile) -> int:
    upload.file.seek(0, 2)
    file_size = upload.file.tell()
    upload.file.seek(0)
    return file_size


def check_image_upload(upload: Optional[UploadFile], config: ImageUploadConfig) -> Optional[UploadFile]:
    """Reject wrong-type or oversized payloads before the upload handler runs.

    A missing file passes through; the handler owns the "file is required"
    check so that it is reported after the name and folder checks.
    """
    if upload is None:
        return None

    if upload.content_type not in config.allowed_types:
        raise FileTypeError(file_type_message(config.allowed_types))

    if upload_size(upload) > config.max_file_size:
        raise SizeLimitError(size_limit_message(config.max_file_size))

    return upload
