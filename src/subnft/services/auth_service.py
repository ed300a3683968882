import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from src.subnft.core.config import settings
from src.subnft.utils.validation import normalize_account


class AuthService:
    """Issues and verifies account bearer tokens (HS256 JWT, ``sub`` = account)."""

    def __init__(self, secret_key: str = settings.JWT_SECRET_KEY, algorithm: str = settings.JWT_ALGORITHM):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.logger = logging.getLogger(__name__)

    def create_access_token(self, account: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create a signed token for ``account``.

        Args:
            account: 0x-prefixed address, normalised to lower case
            expires_delta: Token lifetime, ACCESS_TOKEN_EXPIRE_MINUTES when omitted

        Returns:
            Encoded JWT
        """
        account = normalize_account(account)
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        now = datetime.now(timezone.utc)
        claims = {
            "sub": account,
            "iat": int(now.timestamp()),
            "exp": int((now + expires_delta).timestamp()),
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> str:
        """Return the account a token was issued to.

        Raises:
            ValueError: If the token is invalid, expired or carries no valid account
        """
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            self.logger.warning(f"Token verification failed: {str(e)}")
            raise ValueError("Invalid or expired token") from e

        subject = claims.get("sub")
        if not subject:
            raise ValueError("Token has no subject")
        return normalize_account(subject)
