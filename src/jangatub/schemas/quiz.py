from datetime import datetime
from typing import Annotated, Optional

from pydantic import Field

from .base import BaseSchema, CatalogueRef
from .progress import BadgeEarned

AnswerIndex = Annotated[int, Field(ge=0, le=3)]


class QuestionPublic(BaseSchema):
    """Question as shown to a student: no correct answer, no explanation."""
    id: str
    question: str
    options: list[str]
    points: int
    order: int


class QuizPublic(BaseSchema):
    id: str
    title: str
    description: Optional[str] = None
    duration: int
    level: CatalogueRef
    subject: CatalogueRef
    questions: list[QuestionPublic]


class QuizSummary(BaseSchema):
    id: str
    title: str
    description: Optional[str] = None
    duration: int
    created_at: datetime
    level: CatalogueRef
    subject: CatalogueRef
    question_count: int
    user_best_score: Optional[int] = None
    user_total_points: Optional[int] = None
    user_attempt_count: int = 0


class QuestionCreate(BaseSchema):
    question: str = Field(min_length=5)
    options: list[Annotated[str, Field(min_length=1)]] = Field(min_length=4, max_length=4)
    correct_answer: AnswerIndex
    explanation: Optional[str] = None
    points: int = Field(default=1, ge=1)


class QuizCreate(BaseSchema):
    title: str = Field(min_length=3, max_length=200)
    description: Optional[str] = None
    duration: int = Field(default=30, ge=5, le=180)
    level_id: str = Field(min_length=1)
    subject_id: str = Field(min_length=1)
    questions: list[QuestionCreate] = Field(min_length=1)


class QuizCreatedResponse(BaseSchema):
    id: str
    title: str
    description: Optional[str] = None
    duration: int
    level: str
    subject: str
    questions_count: int


class QuizSubmitRequest(BaseSchema):
    quiz_id: str = Field(min_length=1)
    answers: list[AnswerIndex]


class QuestionResult(BaseSchema):
    question_id: str
    question: str
    options: list[str]
    user_answer: int
    correct_answer: int
    is_correct: bool
    explanation: Optional[str] = None
    points: int


class QuizSubmitResponse(BaseSchema):
    attempt_id: str
    quiz_title: str
    level: str
    subject: str
    score: int
    total_points: int
    percentage: int
    results: list[QuestionResult]
    badge_earned: Optional[BadgeEarned] = None
