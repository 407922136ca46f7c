from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from src.jangatub.models.base import Base, utcnow


class Quiz(Base):
    __tablename__ = "quizzes"

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(Integer, default=30, nullable=False)  # minutes
    is_active = Column(Boolean, default=True, nullable=False)
    level_id = Column(String(36), ForeignKey("levels.id", ondelete="RESTRICT"), nullable=False, index=True)
    subject_id = Column(String(36), ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False, index=True)

    # Relationships
    level = relationship("Level", back_populates="quizzes")
    subject = relationship("Subject", back_populates="quizzes")
    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    attempts = relationship("QuizAttempt", back_populates="quiz", passive_deletes=True)


class Question(Base):
    """Multiple choice question with four options."""
    __tablename__ = "questions"

    quiz_id = Column(String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)
    correct_answer = Column(Integer, nullable=False)
    explanation = Column(Text, nullable=True)
    points = Column(Integer, default=1, nullable=False)
    order = Column(Integer, default=0, nullable=False)

    quiz = relationship("Quiz", back_populates="questions")


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_id = Column(String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    total_points = Column(Integer, nullable=False)
    answers = Column(JSON, nullable=False)
    completed_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="quiz_attempts")
    quiz = relationship("Quiz", back_populates="attempts")
