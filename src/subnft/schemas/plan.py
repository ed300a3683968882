from typing import Optional

from pydantic import Field

from .base import BaseSchema, TimestampSchema


class PlanBase(BaseSchema):
    """Base plan schema."""
    name: str = Field(..., min_length=1)
    price: int = Field(..., ge=0, description="USDC scaled by 10^6")
    description: str = ""


class PlanCreate(PlanBase):
    """Schema for creating a plan."""
    duration: Optional[int] = Field(default=None, gt=0, description="Renewal period in seconds")


class PlanUpdate(BaseSchema):
    """Schema for activating or deactivating a plan."""
    is_active: bool


class PlanResponse(PlanBase, TimestampSchema):
    """Schema for plan response."""
    id: int
    creator: str
    is_active: bool
    duration: int
