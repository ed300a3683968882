from sqlalchemy import BigInteger, Boolean, Column, Integer, String, Text

from src.subnft.models.base import Base


class Plan(Base):
    """Priced subscription offering. Plans are deactivated, never deleted."""
    __tablename__ = "plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    price = Column(BigInteger, nullable=False)  # USDC scaled by 10^6
    description = Column(Text, nullable=False, default="")
    creator = Column(String(42), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    duration = Column(BigInteger, nullable=False)  # renewal period in seconds
