from typing import Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.jangatub.crud.base import CRUDBase
from src.jangatub.models.core import Level, Subject
from src.jangatub.models.quiz import Question, Quiz, QuizAttempt
from src.jangatub.schemas import QuizCreate


class CRUDQuiz(CRUDBase[Quiz, QuizCreate, BaseModel]):
    """CRUD operations for quizzes, their questions and attempts."""

    async def get_full(self, db: AsyncSession, *, id: str, active_only: bool = True) -> Optional[Quiz]:
        """Quiz with level, subject and ordered questions."""
        stmt = (
            select(Quiz)
            .options(selectinload(Quiz.level), selectinload(Quiz.subject), selectinload(Quiz.questions))
            .where(Quiz.id == id)
            .execution_options(populate_existing=True)
        )
        if active_only:
            stmt = stmt.where(Quiz.is_active.is_(True))
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active(
        self, db: AsyncSession, *, level_slug: Optional[str] = None, subject_slug: Optional[str] = None
    ) -> list[tuple[Quiz, int]]:
        """Active quizzes, newest first, with their question counts."""
        question_count = (
            select(func.count(Question.id))
            .where(Question.quiz_id == Quiz.id)
            .correlate(Quiz)
            .scalar_subquery()
        )
        stmt = (
            select(Quiz, question_count)
            .join(Quiz.level)
            .join(Quiz.subject)
            .options(selectinload(Quiz.level), selectinload(Quiz.subject))
            .where(Quiz.is_active.is_(True))
        )
        if level_slug:
            stmt = stmt.where(Level.slug == level_slug)
        if subject_slug:
            stmt = stmt.where(Subject.slug == subject_slug)
        result = await db.execute(stmt.order_by(Quiz.created_at.desc()))
        return [(row[0], row[1]) for row in result.all()]

    async def attempts_for_user(self, db: AsyncSession, *, user_id: str) -> Sequence[QuizAttempt]:
        stmt = select(QuizAttempt).where(QuizAttempt.user_id == user_id).order_by(QuizAttempt.completed_at.desc())
        result = await db.execute(stmt)
        return result.scalars().all()

    async def attempts_with_quiz(self, db: AsyncSession, *, user_id: str) -> Sequence[QuizAttempt]:
        """Attempts of a user, newest first, with their quiz level and subject loaded."""
        stmt = (
            select(QuizAttempt)
            .options(
                selectinload(QuizAttempt.quiz).selectinload(Quiz.level),
                selectinload(QuizAttempt.quiz).selectinload(Quiz.subject),
            )
            .where(QuizAttempt.user_id == user_id)
            .order_by(QuizAttempt.completed_at.desc())
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    async def count_attempts(self, db: AsyncSession, *, user_id: str) -> int:
        return await self.count_matching(db, select(QuizAttempt.id).where(QuizAttempt.user_id == user_id))

    async def count_attempted_subjects(self, db: AsyncSession, *, user_id: str) -> int:
        stmt = (
            select(func.count(func.distinct(Quiz.subject_id)))
            .join(QuizAttempt, QuizAttempt.quiz_id == Quiz.id)
            .where(QuizAttempt.user_id == user_id)
        )
        result = await db.execute(stmt)
        return result.scalar_one()

    def build(self, obj_in: QuizCreate, *, is_active: bool = True) -> Quiz:
        """Quiz with its questions numbered in submission order, not yet added to a session."""
        quiz = Quiz(
            title=obj_in.title,
            description=obj_in.description,
            duration=obj_in.duration,
            level_id=obj_in.level_id,
            subject_id=obj_in.subject_id,
            is_active=is_active,
        )
        quiz.questions = [
            Question(
                question=q.question,
                options=list(q.options),
                correct_answer=q.correct_answer,
                explanation=q.explanation,
                points=q.points,
                order=index,
            )
            for index, q in enumerate(obj_in.questions)
        ]
        return quiz

    async def create(self, db: AsyncSession, *, obj_in: QuizCreate) -> Quiz:
        """Create a quiz together with its questions."""
        quiz = self.build(obj_in)
        db.add(quiz)
        await db.commit()
        return await self.get_full(db, id=quiz.id)

    async def record_attempt(
        self, db: AsyncSession, *, user_id: str, quiz_id: str, score: int, total_points: int, answers: list[int]
    ) -> QuizAttempt:
        attempt = QuizAttempt(
            user_id=user_id, quiz_id=quiz_id, score=score, total_points=total_points, answers=answers
        )
        db.add(attempt)
        await db.commit()
        await db.refresh(attempt)
        return attempt


quiz = CRUDQuiz(Quiz)
