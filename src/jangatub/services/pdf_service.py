"""Best-effort text extraction from remote PDFs.

Any failure yields None; callers fall back to metadata-only prompts.
"""
import asyncio
import io
import logging
import re
from typing import Optional

import httpx
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from src.jangatub.core.cache import TextCache, get_text_cache
from src.jangatub.core.config import settings

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 20
TRUNCATION_MARKER = "\n\n[... remainder of the document truncated for AI analysis ...]"

_CONTROL_CHARS = re.compile(r"[\x00-\x09\x0B\x0C\x0E-\x1F]")
_WIDE_SPACING = re.compile(r"[ \t]{3,}")
_BLANK_RUNS = re.compile(r"\n{4,}")
_WHITESPACE_LINES = re.compile(r"^\s+$", re.MULTILINE)


def clean_extracted_text(text: str) -> str:
    """Strip control characters and collapse the spacing PDF extraction leaves behind."""
    text = _CONTROL_CHARS.sub("", text)
    text = _WIDE_SPACING.sub("  ", text)
    text = _BLANK_RUNS.sub("\n\n\n", text)
    text = _WHITESPACE_LINES.sub("", text)
    return text.strip()


def truncate_for_ai(text: str, max_chars: int = 12000) -> str:
    """Cut ``text`` to ``max_chars``, at the last newline when it falls in the final 20%."""
    if len(text) <= max_chars:
        return text
    truncated = text[:max_chars]
    last_newline = truncated.rfind("\n")
    if last_newline > max_chars * 0.8:
        truncated = truncated[:last_newline]
    return truncated + TRUNCATION_MARKER


def _read_pdf_text(data: bytes) -> tuple[str, int]:
    reader = PdfReader(io.BytesIO(data))
    pages = [page.extract_text() or "" for page in reader.pages]
    return "\n".join(pages), len(pages)


class PdfTextExtractor:
    def __init__(
        self,
        cache: TextCache,
        timeout: Optional[float] = None,
        ttl_seconds: Optional[int] = None,
        max_bytes: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cache = cache
        self.timeout = timeout or settings.PDF_DOWNLOAD_TIMEOUT_SECONDS
        self.ttl_seconds = ttl_seconds or settings.PDF_TEXT_CACHE_TTL_SECONDS
        self.max_bytes = max_bytes or settings.PDF_MAX_DOWNLOAD_BYTES
        self.transport = transport

    async def download(self, url: str) -> Optional[bytes]:
        """Stream the PDF body, giving up once it exceeds ``max_bytes``."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, follow_redirects=True, transport=self.transport
            ) as client:
                async with client.stream("GET", url, headers={"User-Agent": "Jangatub-AI/1.0"}) as response:
                    if response.status_code >= 400:
                        logger.error(f"PDF download returned HTTP {response.status_code} for {url[:60]}")
                        return None

                    content_type = response.headers.get("content-type", "")
                    if content_type and "pdf" not in content_type and "octet-stream" not in content_type:
                        logger.warning(f"Unexpected content type {content_type} for {url[:60]}")

                    declared = response.headers.get("content-length")
                    if declared and declared.isdigit() and int(declared) > self.max_bytes:
                        logger.warning(f"PDF at {url[:60]} declares {declared} bytes, over the {self.max_bytes} limit")
                        return None

                    body = bytearray()
                    async for chunk in response.aiter_bytes():
                        body.extend(chunk)
                        if len(body) > self.max_bytes:
                            logger.warning(f"PDF at {url[:60]} exceeds the {self.max_bytes} byte limit")
                            return None
        except httpx.HTTPError as e:
            logger.error(f"PDF download failed for {url[:60]}: {e}")
            return None

        return bytes(body) or None

    async def extract(self, url: str) -> Optional[str]:
        """Text of the PDF at ``url``, or None when it cannot be read or is mostly images."""
        cached = await self.cache.get(url)
        if cached is not None:
            logger.info(f"PDF text cache hit for {url[:60]}")
            return cached

        data = await self.download(url)
        if not data:
            return None

        try:
            raw_text, page_count = await asyncio.to_thread(_read_pdf_text, data)
        except (PyPdfError, ValueError, KeyError) as e:
            logger.error(f"PDF parsing failed for {url[:60]}: {e}")
            return None

        text = clean_extracted_text(raw_text)
        if len(text) < MIN_TEXT_LENGTH:
            logger.warning(f"Little or no text in {url[:60]} (scanned PDF?)")
            return None

        logger.info(f"Extracted {len(text)} characters from {page_count} pages of {url[:60]}")
        await self.cache.set(url, text, self.ttl_seconds)
        return text

    async def extract_for_ai(self, url: Optional[str], max_chars: Optional[int] = None) -> Optional[str]:
        """Extracted text cut to the model's budget. Missing text is not an error."""
        if not url:
            return None
        text = await self.extract(url)
        if text is None:
            return None
        return truncate_for_ai(text, max_chars or settings.AI_MAX_DOCUMENT_CHARS)


def get_pdf_extractor() -> PdfTextExtractor:
    return PdfTextExtractor(get_text_cache())
