# Services package (re-export feature modules for stable imports)
from .auth import create_access_token, decode_jwt_token, user_id_from_token

__all__ = [
    "create_access_token",
    "decode_jwt_token",
    "user_id_from_token",
]
