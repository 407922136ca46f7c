import logging
from typing import Optional

from fastapi import APIRouter, Query, status

from src.jangatub.core.access import AdminSession, AuthenticatedSession
from src.jangatub.core.errors import NotFoundError, ValidationError
from src.jangatub.crud.crud_catalogue import level as crud_level
from src.jangatub.crud.crud_catalogue import subject as crud_subject
from src.jangatub.crud.crud_quiz import quiz as crud_quiz
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import (
    CatalogueRef,
    QuestionResult,
    QuizCreate,
    QuizCreatedResponse,
    QuizPublic,
    QuizSubmitRequest,
    QuizSubmitResponse,
    QuizSummary,
)
from src.jangatub.services.badge_service import badge_service
from src.jangatub.services.subscription_service import subscription_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[QuizSummary])
async def list_quizzes(
    session: AuthenticatedSession,
    db: SessionDep,
    level: Optional[str] = Query(default=None),
    subject: Optional[str] = Query(default=None),
) -> list[QuizSummary]:
    """Active quizzes with the caller's best score and attempt count."""
    await subscription_service.ensure_premium(db, session)
    rows = await crud_quiz.list_active(db, level_slug=level, subject_slug=subject)
    attempts = await crud_quiz.attempts_for_user(db, user_id=session.user_id)

    best: dict[str, tuple[int, int]] = {}
    counts: dict[str, int] = {}
    for attempt in attempts:
        counts[attempt.quiz_id] = counts.get(attempt.quiz_id, 0) + 1
        current = best.get(attempt.quiz_id)
        if current is None or attempt.score > current[0]:
            best[attempt.quiz_id] = (attempt.score, attempt.total_points)

    summaries = []
    for quiz, question_count in rows:
        score, total = best.get(quiz.id, (None, None))
        summaries.append(QuizSummary(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            duration=quiz.duration,
            created_at=quiz.created_at,
            level=CatalogueRef.model_validate(quiz.level),
            subject=CatalogueRef.model_validate(quiz.subject),
            question_count=question_count,
            user_best_score=score,
            user_total_points=total,
            user_attempt_count=counts.get(quiz.id, 0),
        ))
    return summaries


@router.get("/{quiz_id}", response_model=QuizPublic)
async def read_quiz(quiz_id: str, session: AuthenticatedSession, db: SessionDep) -> QuizPublic:
    await subscription_service.ensure_premium(db, session)
    quiz = await crud_quiz.get_full(db, id=quiz_id)
    if not quiz:
        raise NotFoundError("Quiz not found")
    return QuizPublic.model_validate(quiz)


@router.post("/submit", response_model=QuizSubmitResponse)
async def submit_quiz(
    request: QuizSubmitRequest, session: AuthenticatedSession, db: SessionDep
) -> QuizSubmitResponse:
    """Grade the answers, record the attempt, award badges and return the corrections."""
    await subscription_service.ensure_premium(db, session)
    quiz = await crud_quiz.get_full(db, id=request.quiz_id)
    if not quiz:
        raise NotFoundError("Quiz not found")
    if len(request.answers) != len(quiz.questions):
        raise ValidationError(f"Expected {len(quiz.questions)} answers, got {len(request.answers)}")

    score = 0
    total_points = 0
    results = []
    for question, answer in zip(quiz.questions, request.answers):
        is_correct = answer == question.correct_answer
        total_points += question.points
        if is_correct:
            score += question.points
        results.append(QuestionResult(
            question_id=question.id,
            question=question.question,
            options=question.options,
            user_answer=answer,
            correct_answer=question.correct_answer,
            is_correct=is_correct,
            explanation=question.explanation,
            points=question.points if is_correct else 0,
        ))

    quiz_title = quiz.title
    level_name = quiz.level.name
    subject_name = quiz.subject.name
    attempt = await crud_quiz.record_attempt(
        db,
        user_id=session.user_id,
        quiz_id=quiz.id,
        score=score,
        total_points=total_points,
        answers=list(request.answers),
    )
    attempt_id = attempt.id
    logger.info(f"User {session.user_id} scored {score}/{total_points} on quiz {request.quiz_id}")
    badge = await badge_service.award_for_attempt(
        db, user_id=session.user_id, score=score, total_points=total_points
    )

    return QuizSubmitResponse(
        attempt_id=attempt_id,
        quiz_title=quiz_title,
        level=level_name,
        subject=subject_name,
        score=score,
        total_points=total_points,
        percentage=round(score * 100 / total_points) if total_points else 0,
        results=results,
        badge_earned=badge,
    )


@router.post("", response_model=QuizCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_quiz(request: QuizCreate, session: AdminSession, db: SessionDep) -> QuizCreatedResponse:
    """Create a quiz with its questions (admin)."""
    if not await crud_level.exists(db, id=request.level_id):
        raise NotFoundError("Level not found")
    if not await crud_subject.exists(db, id=request.subject_id):
        raise NotFoundError("Subject not found")

    quiz = await crud_quiz.create(db, obj_in=request)
    logger.info(f"Admin {session.user_id} created quiz {quiz.id}")
    return QuizCreatedResponse(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        duration=quiz.duration,
        level=quiz.level.name,
        subject=quiz.subject.name,
        questions_count=len(quiz.questions),
    )
