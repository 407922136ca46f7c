import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from src.jangatub.core.access import AuthenticatedSession
from src.jangatub.core.errors import NotFoundError, ServiceUnavailableError, UpstreamServiceError
from src.jangatub.crud.crud_document import document as crud_document
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import (
    AssistRequest,
    AssistResponse,
    CorrectRequest,
    CorrectResponse,
    ExplainRequest,
    ExplainResponse,
    GenerateQuizRequest,
    GenerateQuizResponse,
)
from src.jangatub.services.ai_service import DocumentContext, QuizGenerator, get_quiz_generator
from src.jangatub.services.pdf_service import PdfTextExtractor, get_pdf_extractor
from src.jangatub.services.subscription_service import subscription_service
from src.jangatub.services.tutor_service import (
    GENERAL_QUESTION,
    TutorAssistant,
    fallback_assist,
    fallback_correction,
    fallback_explanation,
    get_tutor,
)

router = APIRouter()
logger = logging.getLogger(__name__)

GeneratorDep = Annotated[QuizGenerator, Depends(get_quiz_generator)]
ExtractorDep = Annotated[PdfTextExtractor, Depends(get_pdf_extractor)]
TutorDep = Annotated[TutorAssistant, Depends(get_tutor)]


async def _load_document(db, document_id: str):
    document = await crud_document.get_with_relations(db, id=document_id)
    if not document:
        raise NotFoundError("Document not found")
    return document


@router.post("/generate-quiz", response_model=GenerateQuizResponse, response_model_by_alias=True)
async def generate_quiz(
    request: GenerateQuizRequest,
    session: AuthenticatedSession,
    db: SessionDep,
    generator: GeneratorDep,
    extractor: ExtractorDep,
) -> GenerateQuizResponse:
    """Generate a practice quiz from an exam paper."""
    await subscription_service.ensure_premium(db, session)

    document = await _load_document(db, request.document_id)
    if not generator.configured:
        raise ServiceUnavailableError("AI service is not configured")

    context = DocumentContext.from_document(document)
    content = await extractor.extract_for_ai(document.pdf_url)
    logger.info(
        f"Generating {request.number_of_questions} questions for document {document.id} "
        f"({'with' if content else 'without'} extracted text)"
    )
    quiz = await generator.generate_quiz(context, request.number_of_questions, content)

    return GenerateQuizResponse(
        document_id=document.id,
        document_title=document.title,
        level=context.level,
        subject=context.subject,
        quiz=quiz,
    )


@router.post("/explain", response_model=ExplainResponse, response_model_by_alias=True)
async def explain_document(
    request: ExplainRequest,
    session: AuthenticatedSession,
    db: SessionDep,
    tutor: TutorDep,
    extractor: ExtractorDep,
) -> ExplainResponse:
    """Explain a paper or answer a question about it. Falls back to static advice without the AI."""
    await subscription_service.ensure_premium(db, session)
    document = await _load_document(db, request.document_id)
    context = DocumentContext.from_document(document)

    explanation, is_ai = None, False
    if tutor.configured:
        content = await extractor.extract_for_ai(document.pdf_url)
        try:
            explanation = await tutor.explain_document(context, request.question, content, request.context)
            is_ai = True
        except UpstreamServiceError:
            logger.warning(f"Explanation of document {document.id} fell back to static text")
    if explanation is None:
        explanation = fallback_explanation(context, request.question)

    return ExplainResponse(
        document_id=document.id,
        document_title=document.title,
        level=context.level,
        subject=context.subject,
        question=request.question or GENERAL_QUESTION,
        explanation=explanation,
        is_ai=is_ai,
    )


@router.post("/correct", response_model=CorrectResponse, response_model_by_alias=True)
async def correct_answer(
    request: CorrectRequest,
    session: AuthenticatedSession,
    db: SessionDep,
    tutor: TutorDep,
    extractor: ExtractorDep,
) -> CorrectResponse:
    await subscription_service.ensure_premium(db, session)
    document = await _load_document(db, request.document_id)
    context = DocumentContext.from_document(document)

    correction, is_ai = None, False
    if tutor.configured:
        content = await extractor.extract_for_ai(document.pdf_url)
        try:
            correction = await tutor.correct_answer(
                context, request.exercise_number, request.student_answer, content
            )
            is_ai = True
        except UpstreamServiceError:
            logger.warning(f"Correction for document {document.id} fell back to static text")
    if correction is None:
        correction = fallback_correction(request.exercise_number, request.student_answer)

    return CorrectResponse(
        document_id=document.id,
        document_title=document.title,
        exercise_number=request.exercise_number,
        correction=correction,
        is_ai=is_ai,
    )


@router.post("/assist", response_model=AssistResponse, response_model_by_alias=True)
async def assist(
    request: AssistRequest,
    session: AuthenticatedSession,
    db: SessionDep,
    tutor: TutorDep,
    extractor: ExtractorDep,
) -> AssistResponse:
    """Transcribe, explain, list formulas, outline a method or do all of it for an exercise."""
    await subscription_service.ensure_premium(db, session)
    document = await _load_document(db, request.document_id)
    context = DocumentContext.from_document(document)

    result, is_ai = None, False
    if tutor.configured:
        content = await extractor.extract_for_ai(document.pdf_url)
        try:
            result = await tutor.assist(
                request.action, context, request.exercise_text, request.exercise_number, content
            )
            is_ai = True
        except UpstreamServiceError:
            logger.warning(f"{request.action.value} for document {document.id} fell back to static text")
    if result is None:
        result = fallback_assist(request.action, context, request.exercise_text, request.exercise_number)

    return AssistResponse(
        document_id=document.id,
        document_title=document.title,
        level=context.level,
        subject=context.subject,
        action=request.action,
        result=result,
        is_ai=is_ai,
    )
