"""
Domain errors raised by the plan catalog, the payment ledger and the
subscription lifecycle engine.

Every error carries the HTTP status the API answers with, so the exception
handlers in ``error_handlers`` stay a single mapping.
"""
from fastapi import status


class SubscriptionError(Exception):
    """Base class for all ledger domain errors."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    kind: str = "SubscriptionError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class NotFound(SubscriptionError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "NotFound"


class Unauthorized(SubscriptionError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "Unauthorized"


class InvalidPlan(SubscriptionError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "InvalidPlan"


class InvalidArgument(SubscriptionError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    kind = "InvalidArgument"


class AlreadyCancelled(SubscriptionError):
    status_code = status.HTTP_409_CONFLICT
    kind = "AlreadyCancelled"


class NotDue(SubscriptionError):
    status_code = status.HTTP_409_CONFLICT
    kind = "NotDue"


class PaymentFailed(SubscriptionError):
    """Ledger rejected a transfer; ``reason`` names the ledger failure."""
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    kind = "PaymentFailed"

    def __init__(self, reason: str, message: str = ""):
        super().__init__(message or f"Payment failed: {reason}")
        self.reason = reason


# Ledger failures, wrapped in PaymentFailed by the lifecycle engine


class LedgerError(Exception):
    reason: str = "LedgerError"

    def __init__(self, account: str, required: int, available: int):
        super().__init__(f"{self.reason}: {account} has {available}, needs {required}")
        self.account = account
        self.required = required
        self.available = available


class InsufficientBalance(LedgerError):
    reason = "InsufficientBalance"


class InsufficientAllowance(LedgerError):
    reason = "InsufficientAllowance"
