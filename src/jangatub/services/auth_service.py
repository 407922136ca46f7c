import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.jangatub.core.errors import AuthenticationError, ConflictError
from src.jangatub.core.security import SessionToken, create_session_token, hash_password, verify_password
from src.jangatub.crud.crud_user import user as crud_user
from src.jangatub.models.core import User
from src.jangatub.schemas import RegisterRequest
from src.jangatub.schemas.enums import Role
from src.jangatub.services.subscription_service import subscription_service


class AuthService:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    async def register_user(self, db: AsyncSession, obj_in: RegisterRequest) -> User:
        """
        Register a new user with email and password.

        Raises:
            ConflictError: If the email address is already in use
        """
        email = obj_in.email.lower()
        self.logger.debug(f"Attempting to register user: {email}")

        if await crud_user.get_by_email(db, email=email):
            raise ConflictError("An account with this email already exists")

        user = User(
            name=obj_in.name,
            email=email,
            password_hash=hash_password(obj_in.password),
            role=Role.USER,
            is_premium=False,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("An account with this email already exists")
        await db.refresh(user)

        self.logger.info(f"Registered user {user.id}")
        return user

    async def authenticate_user(self, db: AsyncSession, email: str, password: str) -> User:
        user = await crud_user.get_by_email(db, email=email.strip())
        if not user or not verify_password(password, user.password_hash):
            self.logger.info(f"Failed login for {email}")
            raise AuthenticationError("Invalid email or password")
        return user

    async def issue_session(self, db: AsyncSession, user: User) -> str:
        """Sign a session token reflecting the user's current role and entitlement."""
        entitlement = await subscription_service.get_entitlement(db, user)
        return create_session_token(SessionToken(
            sub=user.id,
            role=user.role,
            is_premium=entitlement.is_premium,
            name=user.name,
            email=user.email,
        ))


auth_service = AuthService()
