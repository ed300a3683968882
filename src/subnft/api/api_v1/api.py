from fastapi import APIRouter

from src.subnft.api.api_v1.endpoints import accounts, events, ledger, plans, subscriptions

api_router = APIRouter()
api_router.include_router(plans.router, prefix="/plans", tags=["plans"])
api_router.include_router(subscriptions.router, prefix="/subscriptions", tags=["subscriptions"])
api_router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
api_router.include_router(ledger.router, prefix="/ledger", tags=["ledger"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
