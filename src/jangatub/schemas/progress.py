from datetime import datetime
from typing import Optional

from .base import BaseSchema
from .subscription import SubscriptionResponse


class BadgeEarned(BaseSchema):
    name: str
    description: str
    icon: str


class UserBadgeResponse(BadgeEarned):
    earned_at: datetime


class ProgressStats(BaseSchema):
    total_attempts: int
    average_percentage: int
    total_score: int
    total_possible: int
    favorites_count: int
    badge_count: int


class SubjectProgress(BaseSchema):
    """Quiz results aggregated over one subject."""
    name: str
    total_attempts: int = 0
    total_score: int = 0
    total_possible: int = 0
    best_percentage: int = 0
    average_percentage: int = 0


class RecentAttempt(BaseSchema):
    id: str
    quiz_title: str
    subject: str
    level: str
    score: int
    total_points: int
    percentage: int
    completed_at: datetime


class ProgressResponse(BaseSchema):
    stats: ProgressStats
    subject_stats: list[SubjectProgress]
    recent_attempts: list[RecentAttempt]
    weak_subjects: list[SubjectProgress]
    strong_subjects: list[SubjectProgress]
    badges: list[UserBadgeResponse]
    subscription: Optional[SubscriptionResponse] = None
