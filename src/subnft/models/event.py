from sqlalchemy import BigInteger, Column, Integer, String

from src.subnft.models.base import Base


class SubscriptionEvent(Base):
    """One row per successful ledger command, read by indexers and the UI."""
    __tablename__ = "subscription_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    operation = Column(String, nullable=False, index=True)
    token_id = Column(BigInteger, nullable=True, index=True)
    actor = Column(String(42), nullable=False, index=True)
    amount = Column(BigInteger, nullable=False, default=0)
    timestamp = Column(BigInteger, nullable=False)
