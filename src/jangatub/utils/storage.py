import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

import aioboto3
from fastapi import UploadFile

from src.jangatub.core.config import settings
from src.jangatub.core.errors import ServiceUnavailableError, UpstreamServiceError, ValidationError
from src.jangatub.schemas.enums import UploadKind

logger = logging.getLogger(__name__)

# Constants
CHUNK_SIZE = 1024 * 1024  # 1MB chunks
MAX_IMAGE_SIZE = 5 * 1024 * 1024
MAX_DOCUMENT_SIZE = 10 * 1024 * 1024
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
ALLOWED_DOCUMENT_TYPES = {"application/pdf"}

FOLDERS = {
    UploadKind.IMAGE: "jangatub/covers",
    UploadKind.DOCUMENT: "jangatub/documents",
}

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "application/pdf": ".pdf",
}


@dataclass(frozen=True)
class UploadRule:
    allowed_types: frozenset
    max_size: int
    type_error: str
    size_error: str


UPLOAD_RULES = {
    UploadKind.IMAGE: UploadRule(
        frozenset(ALLOWED_IMAGE_TYPES),
        MAX_IMAGE_SIZE,
        "Unsupported image format. Use JPG, PNG, WebP or GIF.",
        "Image exceeds 5 MB",
    ),
    UploadKind.DOCUMENT: UploadRule(
        frozenset(ALLOWED_DOCUMENT_TYPES),
        MAX_DOCUMENT_SIZE,
        "Only PDF files are accepted",
        "File exceeds 10 MB",
    ),
}


def validate_content_type(kind: UploadKind, content_type: Optional[str]) -> UploadRule:
    """Validate file type for the upload kind."""
    rule = UPLOAD_RULES[kind]
    if content_type not in rule.allowed_types:
        raise ValidationError(rule.type_error)
    return rule


async def read_limited(file: UploadFile, max_size: int, size_error: str) -> bytes:
    """Read the upload in chunks, stopping as soon as it exceeds ``max_size``."""
    chunks = []
    total = 0
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_size:
            raise ValidationError(size_error)
        chunks.append(chunk)
    return b"".join(chunks)


def build_key(kind: UploadKind, filename: Optional[str], content_type: str) -> str:
    extension = EXTENSIONS.get(content_type) or os.path.splitext(filename or "")[1].lower()
    return f"{FOLDERS[kind]}/{uuid4().hex}{extension}"


class S3Storage:
    """S3-compatible object storage."""

    def __init__(self):
        self.bucket = settings.S3_BUCKET_NAME
        self.timeout = settings.STORAGE_TIMEOUT_SECONDS
        self._session = aioboto3.Session(
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=settings.AWS_REGION,
        )

    @property
    def configured(self) -> bool:
        return settings.storage_configured

    def public_url(self, key: str) -> str:
        if settings.S3_PUBLIC_URL:
            return f"{settings.S3_PUBLIC_URL.rstrip('/')}/{key}"
        if settings.AWS_ENDPOINT_URL:
            return f"{settings.AWS_ENDPOINT_URL.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"

    async def _put(self, key: str, data: bytes, content_type: str) -> None:
        async with self._session.client("s3", endpoint_url=settings.AWS_ENDPOINT_URL) as s3:
            await s3.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """Write an object and return its public URL."""
        if not self.configured:
            raise ServiceUnavailableError("File storage is not configured")
        try:
            await asyncio.wait_for(self._put(key, data, content_type), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Upload of {key} timed out after {self.timeout}s")
            raise UpstreamServiceError("Upload timed out. Please retry.")
        except Exception as e:
            logger.error(f"Upload of {key} failed: {str(e)}", exc_info=True)
            raise UpstreamServiceError("Upload failed. Please retry.")
        logger.info(f"Uploaded {key} ({len(data)} bytes)")
        return self.public_url(key)


def get_storage() -> S3Storage:
    return S3Storage()
