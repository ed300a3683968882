"""Authentication dependencies for FastAPI endpoints."""
import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Path, status
from fastapi.security import OAuth2PasswordBearer

from src.subnft.services.auth_service import AuthService
from src.subnft.utils.validation import normalize_account

logger = logging.getLogger(__name__)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

auth_service = AuthService()


async def get_current_account(token: str = Depends(oauth2_scheme)) -> str:
    """Get the account of the authenticated caller."""
    try:
        account = auth_service.verify_token(token)
    except ValueError as e:
        logger.error(f"Error getting current account: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return account


def get_path_account(account: str = Path(..., description="0x-prefixed account address")) -> str:
    """Validate and normalise an account taken from the URL."""
    try:
        return normalize_account(account)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


# Type aliases for dependencies
CurrentAccount = Annotated[str, Depends(get_current_account)]
PathAccount = Annotated[str, Depends(get_path_account)]
