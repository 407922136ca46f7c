import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from src.jangatub.api.auth_deps import CurrentUser
from src.jangatub.core.config import settings
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import RegisterRequest, RegisterResponse, Token, UserSummary
from src.jangatub.services.auth_service import auth_service

router = APIRouter()
logger = logging.getLogger(__name__)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.ENV == "production",
        samesite="lax",
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: SessionDep) -> RegisterResponse:
    """Create an account with email and password."""
    user = await auth_service.register_user(db, request)
    return RegisterResponse(
        message="Account created successfully",
        user=UserSummary(id=user.id, name=user.name, email=user.email),
    )


@router.post("/login", response_model=Token)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    response: Response,
    db: SessionDep,
) -> Token:
    """Exchange email (as ``username``) and password for a session token."""
    user = await auth_service.authenticate_user(db, form_data.username, form_data.password)
    token = await auth_service.issue_session(db, user)
    set_session_cookie(response, token)
    logger.info(f"User {user.id} signed in")
    return Token(access_token=token)


@router.post("/refresh", response_model=Token)
async def refresh(current_user: CurrentUser, response: Response, db: SessionDep) -> Token:
    """Reissue the session token with the current role and entitlement."""
    token = await auth_service.issue_session(db, current_user)
    set_session_cookie(response, token)
    return Token(access_token=token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> Response:
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    response.status_code = status.HTTP_204_NO_CONTENT
    return response
