from .base import Base
from .core import User, Level, Subject, Document, Favorite
from .subscription import Subscription
from .quiz import Quiz, Question, QuizAttempt
from .badge import Badge, UserBadge

__all__ = [
    "Base",
    "User",
    "Level",
    "Subject",
    "Document",
    "Favorite",
    "Subscription",
    "Quiz",
    "Question",
    "QuizAttempt",
    "Badge",
    "UserBadge",
]
