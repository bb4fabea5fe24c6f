from datetime import datetime, timedelta, timezone
from jose import jwt

from app.core.config import settings


# -------- CREATE TOKEN --------
def create_access_token(data: dict, expires_delta: int | None = None):
    """Generate JWT token"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_delta if expires_delta else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
