from sqlalchemy import Column, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship

from src.jangatub.models.base import Base, enum_type, utcnow
from src.jangatub.schemas.enums import PaymentProvider, SubscriptionPlan, SubscriptionStatus


class Subscription(Base):
    """Premium subscription of a user.

    At most one row per user may be ACTIVE; the partial unique index
    ``uq_subscriptions_one_active`` rejects a second one at commit time.
    """
    __tablename__ = "subscriptions"
    __table_args__ = (
        Index(
            "uq_subscriptions_one_active",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
    )

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan = Column(enum_type(SubscriptionPlan), nullable=False)
    provider = Column(enum_type(PaymentProvider), nullable=True)
    tx_ref = Column(String, nullable=True, unique=True)
    status = Column(enum_type(SubscriptionStatus), default=SubscriptionStatus.PENDING, nullable=False)
    start_at = Column(DateTime, default=utcnow, nullable=False)
    end_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="subscriptions")

    def is_entitling(self, now=None) -> bool:
        """ACTIVE and not past its end date."""
        now = now or utcnow()
        return self.status == SubscriptionStatus.ACTIVE and (self.end_at is None or self.end_at >= now)
