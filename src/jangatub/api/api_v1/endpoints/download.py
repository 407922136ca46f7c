import logging
from typing import Optional

from fastapi import APIRouter

from src.jangatub.core.access import AuthenticatedSession
from src.jangatub.core.errors import NotFoundError
from src.jangatub.crud.crud_document import document as crud_document
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import PackDocument, PackManifest, PackRequest
from src.jangatub.services.subscription_service import subscription_service

router = APIRouter()
logger = logging.getLogger(__name__)


def pack_name(level: str, subject: Optional[str] = None, year: Optional[int] = None) -> str:
    name = f"Pack {level}"
    if subject:
        name += f" - {subject}"
    if year:
        name += f" {year}"
    return name


@router.post("/pack", response_model=PackManifest)
async def download_pack(request: PackRequest, session: AuthenticatedSession, db: SessionDep) -> PackManifest:
    """List the PDFs of a level (optionally one subject and one year) for bulk download."""
    await subscription_service.ensure_premium(db, session)

    documents = await crud_document.get_pack(
        db, level_slug=request.level_slug, subject_slug=request.subject_slug, year=request.year
    )
    if not documents:
        raise NotFoundError("No documents found for these criteria")

    first = documents[0]
    name = pack_name(
        first.level.name,
        first.subject.name if request.subject_slug else None,
        request.year,
    )
    logger.info(f"Pack '{name}' assembled for user {session.user_id} ({len(documents)} documents)")
    return PackManifest(
        pack_name=name,
        total_documents=len(documents),
        documents=[
            PackDocument(
                id=doc.id,
                title=doc.title,
                type=doc.type,
                year=doc.year,
                subject=doc.subject.name,
                pdf_url=doc.pdf_url,
            )
            for doc in documents
        ],
    )
