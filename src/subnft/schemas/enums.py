from enum import Enum


class SubscriptionStatus(str, Enum):
    """Display status of a subscription."""
    ACTIVE = "active"
    EXPIRING = "expiring"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Operation(str, Enum):
    """Ledger commands recorded in the event log."""
    CREATE_PLAN = "create_plan"
    SET_PLAN_ACTIVE = "set_plan_active"
    SUBSCRIBE = "subscribe"
    RENEW = "renew_subscription"
    CANCEL = "cancel_subscription"
    TOGGLE_AUTO_RENEWAL = "toggle_auto_renewal"
    AUTO_RENEW = "process_auto_renewal"
    APPROVE = "approve"
    FAUCET = "faucet"
