"""Authentication dependencies for FastAPI endpoints."""
import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from src.jangatub.core.config import settings
from src.jangatub.core.errors import AuthenticationError
from src.jangatub.core.security import SessionToken, decode_session_token
from src.jangatub.crud.crud_user import user as crud_user
from src.jangatub.db.session import SessionDep
from src.jangatub.models.core import User

logger = logging.getLogger(__name__)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


def extract_token(request: Request) -> Optional[str]:
    """Session token from the Authorization header, falling back to the session cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def session_from_request(request: Request) -> Optional[SessionToken]:
    return decode_session_token(extract_token(request))


async def get_current_session(
    request: Request,
    token: Annotated[Optional[str], Depends(oauth2_scheme)] = None,
) -> Optional[SessionToken]:
    """Session carried by the request, or None for anonymous callers."""
    return decode_session_token(token or request.cookies.get(settings.SESSION_COOKIE_NAME))


async def get_current_user(
    db: SessionDep,
    session: Annotated[Optional[SessionToken], Depends(get_current_session)],
) -> User:
    """Get the current authenticated user."""
    if session is None:
        raise AuthenticationError("Authentication required")

    user = await crud_user.get(db, id=session.user_id)
    if not user:
        logger.warning(f"Session refers to unknown user {session.user_id}")
        raise AuthenticationError("Account no longer exists")
    return user


# Type aliases for dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
