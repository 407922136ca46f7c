import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from src.jangatub.core.access import AdminSession
from src.jangatub.core.errors import ServiceUnavailableError, ValidationError
from src.jangatub.schemas import UploadKind, UploadResponse
from src.jangatub.utils.storage import S3Storage, build_key, get_storage, read_limited, validate_content_type

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=UploadResponse)
async def upload_file(
    session: AdminSession,
    storage: Annotated[S3Storage, Depends(get_storage)],
    file: UploadFile = File(...),
    type: Optional[str] = Form(default=None),
) -> UploadResponse:
    """Upload a cover image (``type=image``) or a PDF document to object storage."""
    if not storage.configured:
        raise ServiceUnavailableError("File storage is not configured")

    try:
        kind = UploadKind(type) if type else UploadKind.DOCUMENT
    except ValueError:
        raise ValidationError("type must be 'image' or 'document'")

    rule = validate_content_type(kind, file.content_type)
    data = await read_limited(file, rule.max_size, rule.size_error)
    key = build_key(kind, file.filename, file.content_type)
    url = await storage.put(key, data, file.content_type)

    logger.info(f"Admin {session.user_id} uploaded {key} ({len(data)} bytes)")
    return UploadResponse(url=url, key=key, size=len(data))
