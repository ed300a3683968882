import logging
import os
from pathlib import Path
from typing import ClassVar, Union

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, ConfigDict, Field, validator
from pydantic_settings import BaseSettings

log_format = logging.Formatter("%(asctime)s : %(levelname)s - %(message)s")

# root logger
root_logger = logging.getLogger()
root_logger.setLevel(logging.INFO)

# standard stream handler
stream_handler = logging.StreamHandler()
stream_handler.setFormatter(log_format)
root_logger.addHandler(stream_handler)

logger = logging.getLogger(__name__)

# Load .env file from docker/server directory when present
env_path = Path(os.getenv("SUBNFT_ENV_FILE", "./docker/server/.env"))
if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    logger.info(f"Loaded environment from {env_path}")
else:
    logger.info(f"No .env file at {env_path}, using process environment")

# 30 days, the renewal period of the default plans
DEFAULT_PLAN_DURATION = 30 * 24 * 60 * 60


class Settings(BaseSettings):
    API_V1_STR: str = "/api/v1"

    # Database Configuration
    DATABASE_URL: str = Field(
        default_factory=lambda: os.getenv("DATABASE_URL"),
        description="Async SQLAlchemy database URL (postgresql+asyncpg or sqlite+aiosqlite)"
    )

    # Ledger Configuration
    ADMIN_ACCOUNTS: str = Field(
        default="",
        description="Comma separated accounts allowed to manage plans"
    )
    TREASURY_ACCOUNT: str = Field(
        default="0xae0ee3f2a610b981994653671bf8c6dbef8a8749",
        description="Account that receives subscription payments and pays refunds"
    )
    DEFAULT_PLAN_DURATION: int = DEFAULT_PLAN_DURATION
    SEED_DEFAULT_PLANS: bool = True
    FAUCET_ENABLED: bool = True
    FAUCET_AMOUNT: int = 1_000 * 10**6

    # Token Configuration
    JWT_SECRET_KEY: str = Field(
        default_factory=lambda: os.getenv("JWT_SECRET_KEY"),
        description="Secret used to sign account bearer tokens"
    )
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Event publishing (disabled when no queue is configured)
    EVENT_QUEUE_NAME: str = ""
    AWS_REGION: str = "eu-central-1"
    AWS_ENDPOINT_URL: str = ""

    # Server Configuration
    SERVER_HOST: AnyHttpUrl = "https://localhost"
    SERVER_PORT: int = 8001
    BACKEND_CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, list[str]]) -> list[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, list):
            return v
        elif isinstance(v, str):
            return [v]
        raise ValueError(v)

    @validator("TREASURY_ACCOUNT")
    def normalize_treasury(cls, v: str) -> str:
        return v.strip().lower()

    PROJECT_NAME: str = "subnft-api"

    Config: ClassVar[ConfigDict] = ConfigDict(arbitrary_types_allowed=True)

    @property
    def admin_accounts(self) -> list[str]:
        return [a.strip().lower() for a in self.ADMIN_ACCOUNTS.split(",") if a.strip()]

    def is_admin(self, account: str) -> bool:
        return account.lower() in self.admin_accounts


settings = Settings()

# Validate required settings
if not settings.DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is required")
if not settings.JWT_SECRET_KEY:
    raise ValueError("JWT_SECRET_KEY environment variable is required")
