"""Password hashing and session tokens."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError

from src.jangatub.core.config import settings
from src.jangatub.schemas.enums import Role

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


class SessionToken(BaseModel):
    """Claims carried by a session token."""
    sub: str
    role: Role = Role.USER
    is_premium: bool = False
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def user_id(self) -> str:
        return self.sub

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def create_session_token(session: SessionToken, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a session token for the given claims."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = session.model_dump(mode="json")
    claims["exp"] = expire
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: Optional[str]) -> Optional[SessionToken]:
    """Return the session carried by ``token``, or None when it is absent, expired or forged."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return SessionToken(**payload)
    except (JWTError, ValidationError) as e:
        logger.info(f"Rejected session token: {e}")
        return None
