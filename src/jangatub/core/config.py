import logging
import os
from pathlib import Path
from typing import ClassVar, Optional, Union

from dotenv import load_dotenv
from pydantic import ConfigDict, Field, validator
from pydantic_settings import BaseSettings

log_format = logging.Formatter("%(asctime)s : %(levelname)s - %(message)s")

# root logger
root_logger = logging.getLogger()
root_logger.setLevel(logging.INFO)

# standard stream handler
stream_handler = logging.StreamHandler()
stream_handler.setFormatter(log_format)
root_logger.addHandler(stream_handler)

logger = logging.getLogger(__name__)

# Load .env file from the project root, or from ENV_FILE when set
env_path = Path(os.getenv("ENV_FILE", "./.env"))
if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    logger.info(f"Loaded environment from {env_path}")
else:
    logger.info(f"No .env file at {env_path}, using process environment")


class Settings(BaseSettings):
    API_V1_STR: str = "/api"
    ENV: str = Field(default_factory=lambda: os.getenv("ENV", "development"))

    # Database Configuration
    DATABASE_URL: str = Field(
        default_factory=lambda: os.getenv("DATABASE_URL"),
        description="Async SQLAlchemy database URL (postgresql+asyncpg://...)"
    )

    # Session tokens
    SECRET_KEY: str = Field(
        default_factory=lambda: os.getenv("SECRET_KEY"),
        description="Key used to sign session tokens"
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30
    SESSION_COOKIE_NAME: str = "jangatub_session"

    # Server Configuration
    SERVER_PORT: int = 8001
    PUBLIC_BASE_URL: str = "http://localhost:3000"
    BACKEND_CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, list[str]]) -> list[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, list):
            return v
        elif isinstance(v, str):
            return [v]
        raise ValueError(v)

    # Object storage (S3 compatible). Uploads answer 503 when unset.
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_REGION: str = "eu-west-3"
    AWS_ENDPOINT_URL: Optional[str] = None
    S3_BUCKET_NAME: Optional[str] = None
    S3_PUBLIC_URL: Optional[str] = None
    STORAGE_TIMEOUT_SECONDS: float = 60.0

    # Groq chat completions
    GROQ_API_KEY: Optional[str] = None
    GROQ_MODEL: str = "llama-3.3-70b-versatile"
    AI_TIMEOUT_SECONDS: float = 60.0

    # Wave checkout
    WAVE_API_KEY: Optional[str] = None
    WAVE_API_URL: str = "https://api.wave.com/v1"
    WAVE_WEBHOOK_SECRET: Optional[str] = None
    PAYMENT_TIMEOUT_SECONDS: float = 15.0

    # PDF text extraction
    PDF_DOWNLOAD_TIMEOUT_SECONDS: float = 20.0
    PDF_MAX_DOWNLOAD_BYTES: int = 25 * 1024 * 1024
    PDF_TEXT_CACHE_TTL_SECONDS: int = 30 * 60
    AI_MAX_DOCUMENT_CHARS: int = 12000
    REDIS_URL: Optional[str] = None

    # Seeded administrator (db/init_db.py). Skipped when unset.
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_NAME: str = "Administrateur"

    PROJECT_NAME: str = "jangatub-api"

    Config: ClassVar[ConfigDict] = ConfigDict(arbitrary_types_allowed=True)

    @property
    def storage_configured(self) -> bool:
        return bool(self.S3_BUCKET_NAME and self.AWS_ACCESS_KEY_ID and self.AWS_SECRET_ACCESS_KEY)


settings = Settings()

# Validate required settings
if not settings.DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is required")
if not settings.SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable is required")
