import asyncio
import logging
import sys
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.subnft.core.config import settings
from src.subnft.crud.crud_plan import plan as crud_plan
from src.subnft.db.session import AsyncSessionLocal, engine
from src.subnft.models import Base

logger = logging.getLogger(__name__)

# Plans created on first deployment: (name, price scaled by 10^6, description)
DEFAULT_PLANS: list[Tuple[str, int, str]] = [
    ("DeFi Analytics Pro", 29_990_000, "Advanced DeFi analytics and portfolio tracking"),
    ("Web3 Gaming Hub", 19_990_000, "Premium gaming features and exclusive NFT drops"),
    ("NFT Marketplace Plus", 39_990_000, "Advanced NFT trading tools and market insights"),
]


async def create_tables(db_engine: AsyncEngine = engine) -> None:
    """Create all tables that do not exist yet."""
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables are in place")


async def _create_default_plans(db: AsyncSession) -> None:
    """Create the default plans if the catalog is empty.

    Args:
        db: Database session

    Raises:
        SQLAlchemyError: If database operation fails
    """
    if await crud_plan.count(db) > 0:
        logger.info("Plan catalog already populated - skipping default plans")
        return

    admins = settings.admin_accounts
    creator = admins[0] if admins else settings.TREASURY_ACCOUNT
    for name, price, description in DEFAULT_PLANS:
        await crud_plan.create_plan(
            db,
            name=name,
            price=price,
            description=description,
            creator=creator,
            duration=settings.DEFAULT_PLAN_DURATION,
        )
        logger.info(f"Created plan: {name} ({price})")


async def init_db(db_engine: AsyncEngine = engine, session_factory=AsyncSessionLocal) -> None:
    """Create tables and seed the default plans."""
    await create_tables(db_engine)
    if not settings.SEED_DEFAULT_PLANS:
        return

    async with session_factory() as db:
        try:
            await _create_default_plans(db)
            await db.commit()
            logger.info("Database initialization completed successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {str(e)}")
            await db.rollback()
            raise


def main() -> None:
    """Main function to run database initialization."""
    try:
        asyncio.run(init_db())
        print("Database initialization completed successfully")
    except Exception as e:
        print(f"Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
