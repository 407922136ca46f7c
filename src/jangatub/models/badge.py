from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from src.jangatub.models.base import Base, utcnow


class Badge(Base):
    """Achievement awarded on quiz submissions, identified by ``name``."""
    __tablename__ = "badges"

    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(200), nullable=False)
    icon = Column(String(16), nullable=False)
    condition = Column(String(200), nullable=False)

    awards = relationship("UserBadge", back_populates="badge", passive_deletes=True)


class UserBadge(Base):
    __tablename__ = "user_badges"
    __table_args__ = (UniqueConstraint("user_id", "badge_id", name="uq_user_badges_user_badge"),)

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    badge_id = Column(String(36), ForeignKey("badges.id", ondelete="CASCADE"), nullable=False)
    earned_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="badges")
    badge = relationship("Badge", back_populates="awards")
