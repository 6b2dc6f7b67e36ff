import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import jwt

from app.core.config import settings

logger = logging.getLogger(__name__)


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    """Issue a bearer token whose ``sub`` claim identifies the owner."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode({"sub": user_id, "exp": expire, "type": "access"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_jwt_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    if not token:
        return None
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError:
        return None


def user_id_from_token(token: Optional[str]) -> Optional[str]:
    payload = decode_jwt_token(token)
    if not payload:
        return None
    user_id = payload.get("sub")
    return str(user_id) if user_id else None
