"""Badges awarded after a quiz submission."""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.jangatub.crud.crud_badge import badge as crud_badge
from src.jangatub.crud.crud_quiz import quiz as crud_quiz
from src.jangatub.schemas import BadgeEarned

FIRST_QUIZ = "first_quiz"
PERFECT_SCORE = "perfect_score"
EXCELLENT = "excellent"
QUIZ_MASTER = "quiz_master"
DEDICATED_LEARNER = "dedicated_learner"
MULTI_SUBJECT = "multi_subject"

EXCELLENT_PERCENTAGE = 80
ATTEMPT_MILESTONES = ((10, QUIZ_MASTER), (25, DEDICATED_LEARNER))
MULTI_SUBJECT_COUNT = 3


def qualifying_badges(percentage: float, attempt_count: int, subject_count: int) -> list[str]:
    """Badge names a submission qualifies for, most notable first."""
    names = []
    if percentage >= 100:
        names.append(PERFECT_SCORE)
    elif percentage >= EXCELLENT_PERCENTAGE:
        names.append(EXCELLENT)
    if attempt_count == 1:
        names.append(FIRST_QUIZ)
    for threshold, name in ATTEMPT_MILESTONES:
        if attempt_count >= threshold:
            names.append(name)
    if subject_count >= MULTI_SUBJECT_COUNT:
        names.append(MULTI_SUBJECT)
    return names


class BadgeService:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    async def award_if_new(self, db: AsyncSession, *, user_id: str, name: str) -> Optional[BadgeEarned]:
        """Give ``name`` to the user unless they hold it already. Returns the badge only when newly given."""
        badge = await crud_badge.get_by_name(db, name=name)
        if badge is None:
            self.logger.warning(f"Badge {name} is not seeded - skipping")
            return None

        earned = BadgeEarned.model_validate(badge)
        badge_id = badge.id
        if await crud_badge.has_badge(db, user_id=user_id, badge_id=badge_id):
            return None
        try:
            await crud_badge.award(db, user_id=user_id, badge_id=badge_id)
        except IntegrityError:
            await db.rollback()
            self.logger.info(f"Badge {name} already awarded to user {user_id}")
            return None

        self.logger.info(f"User {user_id} earned badge {name}")
        return earned

    async def award_for_attempt(
        self, db: AsyncSession, *, user_id: str, score: int, total_points: int
    ) -> Optional[BadgeEarned]:
        """Award every badge the latest attempt unlocks and return the most notable new one."""
        percentage = score * 100 / total_points if total_points else 0
        attempt_count = await crud_quiz.count_attempts(db, user_id=user_id)
        subject_count = await crud_quiz.count_attempted_subjects(db, user_id=user_id)

        first_earned = None
        for name in qualifying_badges(percentage, attempt_count, subject_count):
            earned = await self.award_if_new(db, user_id=user_id, name=name)
            if first_earned is None:
                first_earned = earned
        return first_earned


badge_service = BadgeService()
