from typing import Optional

from pydantic import Field

from .base import BaseSchema
from .enums import SubscriptionStatus


# request


class SubscribeRequest(BaseSchema):
    """Schema for subscribing to a plan."""
    plan_id: int
    duration: int = Field(..., description="Length of the first paid period in seconds")


# response


class SubscriptionDetails(BaseSchema):
    """The three fields exposed by ``getSubscriptionDetails``."""
    plan_id: int
    expiry_date: int
    is_active: bool


class SubscriptionResponse(SubscriptionDetails):
    """Full subscription view with display status."""
    token_id: int
    owner: Optional[str] = None
    auto_renewal_enabled: bool
    status: SubscriptionStatus
    days_remaining: int


class OwnerResponse(BaseSchema):
    token_id: int
    owner: str


class CommandResponse(BaseSchema):
    """Result of a state-changing subscription command."""
    success: bool = True
    operation: str
    token_id: Optional[int] = None
    amount: int = 0
    expiry_date: Optional[int] = None
    auto_renewal_enabled: Optional[bool] = None
