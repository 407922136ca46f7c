import logging
from typing import Optional

from fastapi import APIRouter, Query, status

from src.jangatub.core.access import AdminSession
from src.jangatub.core.errors import NotFoundError
from src.jangatub.crud.crud_catalogue import level as crud_level
from src.jangatub.crud.crud_catalogue import subject as crud_subject
from src.jangatub.crud.crud_document import document as crud_document
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import DocumentCreate, DocumentResponse, DocumentUpdate, MessageResponse, Page, Pagination

router = APIRouter()
logger = logging.getLogger(__name__)


async def _check_references(db, level_id: Optional[str], subject_id: Optional[str]) -> None:
    if level_id is not None and not await crud_level.exists(db, id=level_id):
        raise NotFoundError("Level not found")
    if subject_id is not None and not await crud_subject.exists(db, id=subject_id):
        raise NotFoundError("Subject not found")


@router.get("", response_model=Page[DocumentResponse])
async def list_documents(
    session: AdminSession,
    db: SessionDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> Page[DocumentResponse]:
    documents, total = await crud_document.get_page(db, skip=(page - 1) * limit, limit=limit)
    return Page[DocumentResponse](
        items=[DocumentResponse.model_validate(d) for d in documents],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def read_document(document_id: str, session: AdminSession, db: SessionDep) -> DocumentResponse:
    document = await crud_document.get_with_relations(db, id=document_id)
    if not document:
        raise NotFoundError("Document not found")
    return DocumentResponse.model_validate(document)


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(request: DocumentCreate, session: AdminSession, db: SessionDep) -> DocumentResponse:
    await _check_references(db, request.level_id, request.subject_id)
    created = await crud_document.create(db, obj_in=request)
    logger.info(f"Admin {session.user_id} created document {created.id}")
    return DocumentResponse.model_validate(await crud_document.get_with_relations(db, id=created.id))


@router.put("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str, request: DocumentUpdate, session: AdminSession, db: SessionDep
) -> DocumentResponse:
    document = await crud_document.get(db, id=document_id)
    if not document:
        raise NotFoundError("Document not found")
    await _check_references(db, request.level_id, request.subject_id)
    await crud_document.update(db, db_obj=document, obj_in=request)
    return DocumentResponse.model_validate(await crud_document.get_with_relations(db, id=document_id))


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document(document_id: str, session: AdminSession, db: SessionDep) -> MessageResponse:
    removed = await crud_document.remove(db, id=document_id)
    if not removed:
        raise NotFoundError("Document not found")
    logger.info(f"Admin {session.user_id} deleted document {document_id}")
    return MessageResponse(message="Document deleted")
