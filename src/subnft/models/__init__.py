from .base import Base
from .plan import Plan
from .subscription import Subscription, UserSubscription
from .ledger import TokenBalance, TokenAllowance
from .event import SubscriptionEvent

__all__ = [
    "Base",
    "Plan",
    "Subscription",
    "UserSubscription",
    "TokenBalance",
    "TokenAllowance",
    "SubscriptionEvent"
]
