from fastapi import APIRouter

from src.jangatub.api.api_v1.endpoints import (
    admin_catalogue,
    admin_documents,
    admin_quiz,
    admin_upload,
    admin_users,
    ai,
    auth,
    download,
    favorites,
    payment,
    premium,
    progress,
    quiz,
    users,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
api_router.include_router(quiz.router, prefix="/quiz", tags=["quiz"])
api_router.include_router(progress.router, prefix="/progress", tags=["progress"])
api_router.include_router(download.router, prefix="/download", tags=["download"])
api_router.include_router(premium.router, prefix="/premium", tags=["premium"])
api_router.include_router(payment.router, prefix="/payment", tags=["payment"])
api_router.include_router(ai.router, prefix="/ai", tags=["ai"])

api_router.include_router(admin_users.router, prefix="/admin/users", tags=["admin"])
api_router.include_router(admin_documents.router, prefix="/admin/documents", tags=["admin"])
api_router.include_router(admin_catalogue.levels_router, prefix="/admin/levels", tags=["admin"])
api_router.include_router(admin_catalogue.subjects_router, prefix="/admin/subjects", tags=["admin"])
api_router.include_router(admin_quiz.router, prefix="/admin/quiz", tags=["admin"])
api_router.include_router(admin_upload.router, prefix="/admin/upload", tags=["admin"])
