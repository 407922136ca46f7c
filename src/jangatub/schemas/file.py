from .base import BaseSchema


class UploadResponse(BaseSchema):
    """Location of an object written to storage."""
    url: str
    key: str
    size: int
