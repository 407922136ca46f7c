import asyncio
import logging
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.jangatub.core.config import settings
from src.jangatub.core.security import hash_password
from src.jangatub.db.session import AsyncSessionLocal
from src.jangatub.models import Badge, Level, Subject, User
from src.jangatub.schemas.enums import Role

logger = logging.getLogger(__name__)

LEVELS: list[tuple[str, str]] = [
    ("bfem", "BFEM"),
    ("bac", "BAC"),
]

SUBJECTS: list[tuple[str, str]] = [
    ("mathematiques", "Mathématiques"),
    ("physique-chimie", "Physique-Chimie"),
    ("svt", "SVT"),
    ("francais", "Français"),
    ("anglais", "Anglais"),
    ("histoire-geo", "Histoire-Géographie"),
    ("philosophie", "Philosophie"),
]

# (name, description, icon, condition)
BADGES: list[tuple[str, str, str, str]] = [
    ("first_quiz", "Premier quiz complété", "🎯", "Compléter votre premier quiz"),
    ("perfect_score", "Score parfait !", "🏆", "Obtenir 100% à un quiz"),
    ("excellent", "Excellent résultat", "⭐", "Obtenir 80% ou plus à un quiz"),
    ("quiz_master", "Maître des quiz", "🧠", "Compléter 10 quiz"),
    ("dedicated_learner", "Apprenant assidu", "📚", "Compléter 25 quiz"),
    ("multi_subject", "Polyvalent", "🌟", "Compléter des quiz dans 3 matières ou plus"),
]


async def _create_catalogue(db: AsyncSession, model, entries: list[tuple[str, str]]) -> None:
    """Create levels or subjects that don't exist yet, matched by slug."""
    for slug, name in entries:
        result = await db.execute(select(model.id).where(model.slug == slug))
        if result.scalar_one_or_none():
            logger.info(f"{model.__name__} already exists: {slug} - skipping")
            continue
        db.add(model(slug=slug, name=name))
        logger.info(f"Created {model.__name__.lower()}: {name}")


async def _create_badges(db: AsyncSession) -> None:
    for name, description, icon, condition in BADGES:
        result = await db.execute(select(Badge.id).where(Badge.name == name))
        if result.scalar_one_or_none():
            logger.info(f"Badge already exists: {name} - skipping")
            continue
        db.add(Badge(name=name, description=description, icon=icon, condition=condition))
        logger.info(f"Created badge: {name}")


async def _create_admin(db: AsyncSession) -> None:
    """Create the administrator account configured by ADMIN_EMAIL and ADMIN_PASSWORD."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set - skipping admin creation")
        return

    email = settings.ADMIN_EMAIL.lower()
    result = await db.execute(select(User).where(User.email == email))
    existing = result.scalar_one_or_none()
    if existing:
        if existing.role != Role.ADMIN:
            existing.role = Role.ADMIN
            logger.info(f"Promoted existing user to admin: {email}")
        else:
            logger.info(f"Admin already exists: {email} - skipping")
        return

    db.add(User(
        name=settings.ADMIN_NAME,
        email=email,
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        role=Role.ADMIN,
    ))
    logger.info(f"Created admin: {email}")


async def init_db() -> None:
    """Initialize the database with seed data."""
    async with AsyncSessionLocal() as db:
        try:
            await _create_catalogue(db, Level, LEVELS)
            await _create_catalogue(db, Subject, SUBJECTS)
            await _create_badges(db)
            await _create_admin(db)
            await db.commit()
            logger.info("Database initialization completed successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {str(e)}")
            await db.rollback()
            raise


def main() -> None:
    """Main function to run database initialization."""
    try:
        asyncio.run(init_db())
        print("✅ Database initialization completed successfully!")
    except Exception as e:
        print(f"❌ Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
