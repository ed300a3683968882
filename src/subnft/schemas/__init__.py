from .base import BaseSchema, TimestampSchema
from .enums import SubscriptionStatus, Operation
from .plan import PlanCreate, PlanUpdate, PlanResponse
from .subscription import SubscribeRequest, SubscriptionDetails, SubscriptionResponse, OwnerResponse, CommandResponse
from .ledger import BalanceResponse, AllowanceResponse, ApproveRequest
from .event import EventResponse
