"""Quiz progress summary for the student dashboard."""
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from src.jangatub.crud.crud_badge import badge as crud_badge
from src.jangatub.crud.crud_favorite import favorite as crud_favorite
from src.jangatub.crud.crud_quiz import quiz as crud_quiz
from src.jangatub.crud.crud_subscription import subscription as crud_subscription
from src.jangatub.models.badge import UserBadge
from src.jangatub.models.quiz import QuizAttempt
from src.jangatub.models.subscription import Subscription
from src.jangatub.schemas import (
    ProgressResponse,
    ProgressStats,
    RecentAttempt,
    SubjectProgress,
    SubscriptionResponse,
    UserBadgeResponse,
)

RECENT_ATTEMPTS = 10
WEAK_PERCENTAGE = 50
STRONG_PERCENTAGE = 80


def percentage(score: int, total: int) -> int:
    return round(score * 100 / total) if total else 0


def subject_progress(attempts: Sequence[QuizAttempt]) -> list[SubjectProgress]:
    """Per-subject totals, best and average percentages, in order of first appearance."""
    by_subject: dict[str, SubjectProgress] = {}
    for attempt in attempts:
        name = attempt.quiz.subject.name
        stats = by_subject.setdefault(name, SubjectProgress(name=name))
        stats.total_attempts += 1
        stats.total_score += attempt.score
        stats.total_possible += attempt.total_points
        stats.best_percentage = max(stats.best_percentage, percentage(attempt.score, attempt.total_points))

    for stats in by_subject.values():
        stats.average_percentage = percentage(stats.total_score, stats.total_possible)
    return list(by_subject.values())


def build_progress(
    attempts: Sequence[QuizAttempt],
    awards: Sequence[UserBadge],
    favorites_count: int,
    subscription: Optional[Subscription] = None,
) -> ProgressResponse:
    """Assemble the dashboard from a user's attempts (newest first) and badges."""
    subjects = subject_progress(attempts)
    total_score = sum(a.score for a in attempts)
    total_possible = sum(a.total_points for a in attempts)

    return ProgressResponse(
        stats=ProgressStats(
            total_attempts=len(attempts),
            average_percentage=percentage(total_score, total_possible),
            total_score=total_score,
            total_possible=total_possible,
            favorites_count=favorites_count,
            badge_count=len(awards),
        ),
        subject_stats=subjects,
        recent_attempts=[
            RecentAttempt(
                id=a.id,
                quiz_title=a.quiz.title,
                subject=a.quiz.subject.name,
                level=a.quiz.level.name,
                score=a.score,
                total_points=a.total_points,
                percentage=percentage(a.score, a.total_points),
                completed_at=a.completed_at,
            )
            for a in attempts[:RECENT_ATTEMPTS]
        ],
        weak_subjects=sorted(
            (s for s in subjects if s.average_percentage < WEAK_PERCENTAGE),
            key=lambda s: s.average_percentage,
        ),
        strong_subjects=sorted(
            (s for s in subjects if s.average_percentage >= STRONG_PERCENTAGE),
            key=lambda s: s.average_percentage,
            reverse=True,
        ),
        badges=[
            UserBadgeResponse(
                name=award.badge.name,
                description=award.badge.description,
                icon=award.badge.icon,
                earned_at=award.earned_at,
            )
            for award in awards
        ],
        subscription=SubscriptionResponse.model_validate(subscription) if subscription else None,
    )


async def get_progress(db: AsyncSession, *, user_id: str) -> ProgressResponse:
    attempts = await crud_quiz.attempts_with_quiz(db, user_id=user_id)
    awards = await crud_badge.awards_for_user(db, user_id=user_id)
    favorites_count = await crud_favorite.count_for_user(db, user_id=user_id)
    subscription = await crud_subscription.get_active(db, user_id=user_id)
    return build_progress(attempts, awards, favorites_count, subscription)
