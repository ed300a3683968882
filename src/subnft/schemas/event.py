from typing import Optional

from .base import BaseSchema


class EventResponse(BaseSchema):
    """Schema for an event log entry."""
    id: int
    operation: str
    token_id: Optional[int] = None
    actor: str
    amount: int
    timestamp: int
