from typing import Optional

from pydantic import Field

from .base import BaseSchema
from .enums import AssistAction


class GenerateQuizRequest(BaseSchema):
    document_id: str = Field(min_length=1)
    number_of_questions: int = Field(default=5, ge=3, le=15)


class AdminGenerateQuizRequest(BaseSchema):
    document_id: str = Field(min_length=1)
    number_of_questions: int = Field(default=10, ge=5, le=30)


class GeneratedQuestion(BaseSchema):
    question: str
    options: list[str]
    correct_answer: int
    explanation: str
    points: Optional[int] = None


class GeneratedQuiz(BaseSchema):
    title: str
    description: Optional[str] = None
    duration: Optional[int] = None
    questions: list[GeneratedQuestion]


class GenerateQuizResponse(BaseSchema):
    document_id: str
    document_title: str
    level: str
    subject: str
    quiz: GeneratedQuiz
    is_ai: bool = Field(default=True, serialization_alias="isAI")


class ExplainRequest(BaseSchema):
    document_id: str = Field(min_length=1)
    question: Optional[str] = Field(default=None, min_length=10, max_length=1000)
    context: Optional[str] = Field(default=None, max_length=2000)


class ExplainResponse(BaseSchema):
    document_id: str
    document_title: str
    level: str
    subject: str
    question: str
    explanation: str
    is_ai: bool = Field(serialization_alias="isAI")


class CorrectRequest(BaseSchema):
    document_id: str = Field(min_length=1)
    exercise_number: str = Field(min_length=1, max_length=100)
    student_answer: str = Field(min_length=5, max_length=5000)


class CorrectResponse(BaseSchema):
    document_id: str
    document_title: str
    exercise_number: str
    correction: str
    is_ai: bool = Field(serialization_alias="isAI")


class AssistRequest(BaseSchema):
    document_id: str = Field(min_length=1)
    action: AssistAction = AssistAction.FULL_ASSIST
    exercise_text: Optional[str] = Field(default=None, max_length=10000)
    exercise_number: Optional[str] = Field(default=None, max_length=100)


class AssistResponse(BaseSchema):
    document_id: str
    document_title: str
    level: str
    subject: str
    action: AssistAction
    result: str
    is_ai: bool = Field(serialization_alias="isAI")
