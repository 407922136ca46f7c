from pydantic import BaseModel, EmailStr, Field, field_validator

from .base import BaseSchema
from .user import UserSummary


class RegisterRequest(BaseSchema):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class RegisterResponse(BaseSchema):
    message: str
    user: UserSummary


class Token(BaseModel):
    """OAuth2 token response (snake_case per RFC 6749)."""
    access_token: str
    token_type: str = "bearer"
