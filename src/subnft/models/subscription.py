from sqlalchemy import BigInteger, Boolean, Column, ForeignKey, Integer, String

from src.subnft.models.base import Base


class Subscription(Base):
    """Subscription record keyed by its token id.

    Cancelled records are kept with ``is_active`` false and no owner.
    """
    __tablename__ = "subscriptions"

    token_id = Column(BigInteger, primary_key=True, autoincrement=False)
    owner = Column(String(42), nullable=True, index=True)
    plan_id = Column(Integer, ForeignKey("plans.id"), nullable=False)
    expiry_date = Column(BigInteger, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    auto_renewal_enabled = Column(Boolean, default=False, nullable=False)
    # What was paid, and for how long, in the current paid period
    period_price = Column(BigInteger, nullable=False)
    period_length = Column(BigInteger, nullable=False)


class UserSubscription(Base):
    """Append-only index of every token id ever issued to an account."""
    __tablename__ = "user_subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account = Column(String(42), nullable=False, index=True)
    token_id = Column(BigInteger, ForeignKey("subscriptions.token_id"), nullable=False)
