"""Seeding helpers shared by the test modules.

They write through a synchronous session on ``sync_engine`` so tests can
prepare and inspect rows without an event loop.
"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.jangatub.core.security import SessionToken, create_session_token
from src.jangatub.db.session import sync_engine
from src.jangatub.db.init_db import BADGES
from src.jangatub.models import (
    Badge,
    Document,
    Level,
    Question,
    Quiz,
    QuizAttempt,
    Subject,
    Subscription,
    User,
    UserBadge,
)
from src.jangatub.models.base import utcnow
from src.jangatub.schemas.enums import (
    DocumentType,
    PaymentProvider,
    Role,
    SubscriptionPlan,
    SubscriptionStatus,
)


def session() -> Session:
    return Session(sync_engine, expire_on_commit=False)


def make_user(
    email: str = "aminata@example.com",
    *,
    name: str = "Aminata",
    role: Role = Role.USER,
    is_premium: bool = False,
    password_hash: Optional[str] = None,
) -> User:
    with session() as db:
        user = User(name=name, email=email, role=role, is_premium=is_premium, password_hash=password_hash)
        db.add(user)
        db.commit()
        return user


def make_subscription(
    user: User,
    *,
    plan: SubscriptionPlan = SubscriptionPlan.MONTHLY,
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
    tx_ref: Optional[str] = None,
    end_at: Optional[datetime] = None,
    provider: Optional[PaymentProvider] = PaymentProvider.WAVE,
) -> Subscription:
    with session() as db:
        subscription = Subscription(
            user_id=user.id,
            plan=plan,
            provider=provider,
            tx_ref=tx_ref,
            status=status,
            start_at=utcnow(),
            end_at=end_at if end_at is not None else utcnow() + timedelta(days=30),
        )
        db.add(subscription)
        db.commit()
        return subscription


def make_catalogue_entry(model, slug: str, name: str):
    with session() as db:
        entry = model(slug=slug, name=name)
        db.add(entry)
        db.commit()
        return entry


def make_document(
    level: Level,
    subject: Subject,
    *,
    title: str = "Sujet de mathématiques",
    year: int = 2023,
    type: DocumentType = DocumentType.SUBJECT,
) -> Document:
    with session() as db:
        document = Document(
            title=title,
            year=year,
            type=type,
            level_id=level.id,
            subject_id=subject.id,
            pdf_url=f"https://cdn.example.com/{level.slug}/{subject.slug}/{year}-{type.value.lower()}.pdf",
        )
        db.add(document)
        db.commit()
        return document


def make_quiz(level: Level, subject: Subject, *, is_active: bool = True) -> Quiz:
    """Quiz of two questions worth 1 and 2 points, both answered by option 1."""
    with session() as db:
        quiz = Quiz(
            title="Fonctions numériques",
            description="Révision",
            duration=20,
            is_active=is_active,
            level_id=level.id,
            subject_id=subject.id,
        )
        quiz.questions = [
            Question(
                question="Quelle est la dérivée de x² ?",
                options=["x", "2x", "x²", "2"],
                correct_answer=1,
                explanation="On applique (xⁿ)' = n·xⁿ⁻¹.",
                points=1,
                order=0,
            ),
            Question(
                question="Quelle est la limite de 1/x en +∞ ?",
                options=["1", "0", "+∞", "-∞"],
                correct_answer=1,
                explanation="1/x tend vers 0.",
                points=2,
                order=1,
            ),
        ]
        db.add(quiz)
        db.commit()
        return quiz


def make_attempt(
    user: User, quiz: Quiz, *, score: int, total_points: int = 3, completed_at: Optional[datetime] = None
) -> QuizAttempt:
    with session() as db:
        attempt = QuizAttempt(
            user_id=user.id,
            quiz_id=quiz.id,
            score=score,
            total_points=total_points,
            answers=[],
            completed_at=completed_at or utcnow(),
        )
        db.add(attempt)
        db.commit()
        return attempt


def make_badges() -> None:
    with session() as db:
        db.add_all(
            Badge(name=name, description=description, icon=icon, condition=condition)
            for name, description, icon, condition in BADGES
        )
        db.commit()


def badges_of(user_id: str) -> list[str]:
    with session() as db:
        result = db.execute(
            select(Badge.name).join(UserBadge, UserBadge.badge_id == Badge.id).where(UserBadge.user_id == user_id)
        )
        return sorted(result.scalars().all())


def get_user(user_id: str) -> Optional[User]:
    with session() as db:
        return db.get(User, user_id)


def subscriptions_of(user_id: str) -> list[Subscription]:
    with session() as db:
        result = db.execute(
            select(Subscription).where(Subscription.user_id == user_id).order_by(Subscription.created_at)
        )
        return list(result.scalars().all())


def auth_headers(user: User, *, is_premium: Optional[bool] = None) -> dict[str, str]:
    """Bearer header for ``user``; ``is_premium`` overrides the token claim."""
    token = create_session_token(SessionToken(
        sub=user.id,
        role=user.role,
        is_premium=user.is_premium if is_premium is None else is_premium,
        name=user.name,
        email=user.email,
    ))
    return {"Authorization": f"Bearer {token}"}
