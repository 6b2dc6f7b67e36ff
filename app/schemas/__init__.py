# Schemas package
from .common.common import MessageResponse, ErrorResponse
from .images.image import FolderSummary, ImageResponse, ImageRenameRequest

__all__ = [
    "MessageResponse",
    "ErrorResponse",
    "FolderSummary",
    "ImageResponse",
    "ImageRenameRequest",
]
