import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.jangatub.core.access import AdminSession
from src.jangatub.core.errors import NotFoundError, ServiceUnavailableError, UpstreamServiceError
from src.jangatub.crud.crud_document import document as crud_document
from src.jangatub.crud.crud_quiz import quiz as crud_quiz
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import (
    AdminGenerateQuizRequest,
    GeneratedQuiz,
    QuestionCreate,
    QuizCreate,
    QuizCreatedResponse,
)
from src.jangatub.services.ai_service import DocumentContext, QuizGenerator, get_quiz_generator
from src.jangatub.services.pdf_service import PdfTextExtractor, get_pdf_extractor

router = APIRouter()
logger = logging.getLogger(__name__)


class GeneratedQuizSaved(BaseModel):
    success: bool = True
    quiz: QuizCreatedResponse
    message: str


def to_quiz_create(generated: GeneratedQuiz, level_id: str, subject_id: str) -> QuizCreate:
    try:
        return QuizCreate(
            title=generated.title,
            description=generated.description,
            duration=generated.duration or 30,
            level_id=level_id,
            subject_id=subject_id,
            questions=[
                QuestionCreate(
                    question=q.question,
                    options=q.options,
                    correct_answer=q.correct_answer,
                    explanation=q.explanation,
                    points=q.points or 1,
                )
                for q in generated.questions
            ],
        )
    except PydanticValidationError as e:
        logger.error(f"Generated quiz rejected: {e}")
        raise UpstreamServiceError("The AI did not return a valid quiz. Please retry.")


@router.post("/generate", response_model=GeneratedQuizSaved, status_code=status.HTTP_201_CREATED)
async def generate_and_save_quiz(
    request: AdminGenerateQuizRequest,
    session: AdminSession,
    db: SessionDep,
    generator: Annotated[QuizGenerator, Depends(get_quiz_generator)],
    extractor: Annotated[PdfTextExtractor, Depends(get_pdf_extractor)],
) -> GeneratedQuizSaved:
    """Generate a graded quiz from a document and store it as an active quiz."""
    document = await crud_document.get_with_relations(db, id=request.document_id)
    if not document:
        raise NotFoundError("Document not found")
    if not generator.configured:
        raise ServiceUnavailableError("AI service is not configured")

    context = DocumentContext.from_document(document)
    content = await extractor.extract_for_ai(document.pdf_url)
    generated = await generator.generate_admin_quiz(context, request.number_of_questions, content)

    quiz = await crud_quiz.create(db, obj_in=to_quiz_create(generated, document.level_id, document.subject_id))
    logger.info(f"Admin {session.user_id} generated quiz {quiz.id} from document {request.document_id}")

    return GeneratedQuizSaved(
        quiz=QuizCreatedResponse(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            duration=quiz.duration,
            level=quiz.level.name,
            subject=quiz.subject.name,
            questions_count=len(quiz.questions),
        ),
        message=f"Quiz created with {len(quiz.questions)} questions",
    )
