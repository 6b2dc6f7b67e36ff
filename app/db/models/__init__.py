# Models package (re-export feature modules for stable imports)
from .users.user import User
from .media.folder import Folder
from .media.image import Image, ImageCreate, ImageRename

__all__ = [
    "User",
    "Folder",
    "Image",
    "ImageCreate",
    "ImageRename",
]
