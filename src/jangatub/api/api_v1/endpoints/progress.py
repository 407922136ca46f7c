from fastapi import APIRouter

from src.jangatub.core.access import AuthenticatedSession
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import ProgressResponse
from src.jangatub.services.progress_service import get_progress
from src.jangatub.services.subscription_service import subscription_service

router = APIRouter()


@router.get("", response_model=ProgressResponse)
async def read_progress(session: AuthenticatedSession, db: SessionDep) -> ProgressResponse:
    """Quiz statistics, per-subject strengths and weaknesses, badges and subscription of the caller."""
    await subscription_service.ensure_premium(db, session)
    return await get_progress(db, user_id=session.user_id)
