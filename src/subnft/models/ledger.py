from sqlalchemy import BigInteger, CheckConstraint, Column, String

from src.subnft.models.base import Base


class TokenBalance(Base):
    """USDC balance of an account, scaled by 10^6."""
    __tablename__ = "token_balances"
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_token_balances_non_negative"),)

    account = Column(String(42), primary_key=True)
    balance = Column(BigInteger, nullable=False, default=0)


class TokenAllowance(Base):
    """Amount ``spender`` may pull from ``owner``."""
    __tablename__ = "token_allowances"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_token_allowances_non_negative"),)

    owner = Column(String(42), primary_key=True)
    spender = Column(String(42), primary_key=True)
    amount = Column(BigInteger, nullable=False, default=0)
