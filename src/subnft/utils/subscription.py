"""
Time and display-status helpers for subscriptions.
"""
import math
import time
from typing import Tuple

from src.subnft.schemas.enums import SubscriptionStatus

SECONDS_PER_DAY = 24 * 60 * 60
EXPIRING_WINDOW_DAYS = 7


def current_timestamp() -> int:
    """Current unix time in whole seconds."""
    return int(time.time())


def get_days_remaining(expiry_date: int, now: int) -> int:
    """Whole days left before expiry, rounded up, never negative."""
    return max(0, math.ceil((expiry_date - now) / SECONDS_PER_DAY))


def get_subscription_status(expiry_date: int, is_active: bool, now: int) -> Tuple[SubscriptionStatus, int]:
    """
    Classify a subscription for display.

    More than a week left is active, anything left up to a week is expiring,
    nothing left is expired. Cancelled subscriptions report zero days.

    Returns:
        (status, days_remaining)
    """
    if not is_active:
        return SubscriptionStatus.CANCELLED, 0
    days_remaining = get_days_remaining(expiry_date, now)
    if days_remaining > EXPIRING_WINDOW_DAYS:
        return SubscriptionStatus.ACTIVE, days_remaining
    if days_remaining > 0:
        return SubscriptionStatus.EXPIRING, days_remaining
    return SubscriptionStatus.EXPIRED, 0
