"""Levels and subjects share one set of admin routes."""
import logging

from fastapi import APIRouter, status
from sqlalchemy.exc import IntegrityError

from src.jangatub.core.access import AdminSession
from src.jangatub.core.errors import ConflictError, NotFoundError
from src.jangatub.crud.crud_catalogue import CRUDCatalogue
from src.jangatub.crud.crud_catalogue import level as crud_level
from src.jangatub.crud.crud_catalogue import subject as crud_subject
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import CatalogueEntryCreate, CatalogueEntryResponse, CatalogueEntryUpdate, MessageResponse

logger = logging.getLogger(__name__)


def build_catalogue_router(crud: CRUDCatalogue, label: str) -> APIRouter:
    router = APIRouter()

    async def _ensure_slug_free(db, slug: str, current_id: str = None) -> None:
        existing = await crud.get_by_slug(db, slug=slug)
        if existing and existing.id != current_id:
            raise ConflictError(f"A {label.lower()} with this slug already exists")

    async def _commit(db, action):
        try:
            return await action()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"A {label.lower()} with this slug already exists")

    @router.get("", response_model=list[CatalogueEntryResponse])
    async def list_entries(session: AdminSession, db: SessionDep) -> list[CatalogueEntryResponse]:
        rows = await crud.list_with_usage(db)
        return [
            CatalogueEntryResponse(
                **CatalogueEntryResponse.model_validate(entry).model_dump(exclude={"document_count", "quiz_count"}),
                document_count=documents,
                quiz_count=quizzes,
            )
            for entry, documents, quizzes in rows
        ]

    @router.post("", response_model=CatalogueEntryResponse, status_code=status.HTTP_201_CREATED)
    async def create_entry(
        request: CatalogueEntryCreate, session: AdminSession, db: SessionDep
    ) -> CatalogueEntryResponse:
        await _ensure_slug_free(db, request.slug)
        entry = await _commit(db, lambda: crud.create(db, obj_in=request))
        logger.info(f"Admin {session.user_id} created {label.lower()} {entry.slug}")
        return CatalogueEntryResponse.model_validate(entry)

    @router.put("/{entry_id}", response_model=CatalogueEntryResponse)
    async def update_entry(
        entry_id: str, request: CatalogueEntryUpdate, session: AdminSession, db: SessionDep
    ) -> CatalogueEntryResponse:
        entry = await crud.get(db, id=entry_id)
        if not entry:
            raise NotFoundError(f"{label} not found")
        if request.slug is not None:
            await _ensure_slug_free(db, request.slug, current_id=entry_id)
        entry = await _commit(db, lambda: crud.update(db, db_obj=entry, obj_in=request))
        documents, quizzes = await crud.usage(db, id=entry_id)
        return CatalogueEntryResponse(
            **CatalogueEntryResponse.model_validate(entry).model_dump(exclude={"document_count", "quiz_count"}),
            document_count=documents,
            quiz_count=quizzes,
        )

    @router.delete("/{entry_id}", response_model=MessageResponse)
    async def delete_entry(entry_id: str, session: AdminSession, db: SessionDep) -> MessageResponse:
        if not await crud.exists(db, id=entry_id):
            raise NotFoundError(f"{label} not found")
        documents, quizzes = await crud.usage(db, id=entry_id)
        if documents or quizzes:
            raise ConflictError(
                f"Cannot delete this {label.lower()}: {documents} document(s) and {quizzes} quiz(zes) use it"
            )
        await crud.remove(db, id=entry_id)
        logger.info(f"Admin {session.user_id} deleted {label.lower()} {entry_id}")
        return MessageResponse(message=f"{label} deleted")

    return router


levels_router = build_catalogue_router(crud_level, "Level")
subjects_router = build_catalogue_router(crud_subject, "Subject")
