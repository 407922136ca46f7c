import logging

from fastapi import APIRouter
from sqlalchemy.exc import IntegrityError

from src.jangatub.api.auth_deps import CurrentUser
from src.jangatub.core.errors import NotFoundError
from src.jangatub.crud.crud_document import document as crud_document
from src.jangatub.crud.crud_favorite import favorite as crud_favorite
from src.jangatub.db.session import SessionDep
from src.jangatub.models.core import Favorite
from src.jangatub.schemas import DocumentResponse, FavoriteToggleRequest, FavoriteToggleResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    request: FavoriteToggleRequest,
    current_user: CurrentUser,
    db: SessionDep,
) -> FavoriteToggleResponse:
    """Remove the favorite if it exists, create it otherwise."""
    user_id = current_user.id
    existing = await crud_favorite.get_link(db, user_id=user_id, document_id=request.document_id)
    if existing:
        await db.delete(existing)
        await db.commit()
        return FavoriteToggleResponse(favorited=False)

    if not await crud_document.exists(db, id=request.document_id):
        raise NotFoundError("Document not found")

    db.add(Favorite(user_id=user_id, document_id=request.document_id))
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request created the same link first.
        await db.rollback()
        logger.info(f"Favorite {user_id}/{request.document_id} already created")
    return FavoriteToggleResponse(favorited=True)


@router.get("", response_model=list[DocumentResponse])
async def list_favorites(current_user: CurrentUser, db: SessionDep) -> list[DocumentResponse]:
    """Documents the current user has favorited."""
    documents = await crud_favorite.documents_for_user(db, user_id=current_user.id)
    return [DocumentResponse.model_validate(doc) for doc in documents]
