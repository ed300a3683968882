#!/usr/bin/env python3
"""
Issue bearer tokens for accounts and store them in .env.local.

Usage: python -m src.subnft.db.issue_tokens [ACCOUNT ...]
Without arguments a token is issued for every account in ADMIN_ACCOUNTS.

NOTE: This script is for development purposes only. Production deployments
should issue tokens after verifying a wallet signature.
"""
import sys
from pathlib import Path

from src.subnft.core.config import settings
from src.subnft.services.auth_service import AuthService

ENV_LOCAL = Path(".env.local")


def issue_tokens(accounts: list[str]) -> dict[str, str]:
    """Create one token per account."""
    auth_service = AuthService()
    return {account.lower(): auth_service.create_access_token(account) for account in accounts}


def write_env_local(tokens: dict[str, str], path: Path = ENV_LOCAL) -> None:
    """Append ACCESS_TOKEN_<ACCOUNT> lines, replacing older lines for the same account."""
    lines = path.read_text().splitlines() if path.exists() else []
    keys = {f"ACCESS_TOKEN_{account.upper()}" for account in tokens}
    lines = [line for line in lines if line.split("=", 1)[0] not in keys]
    for account, token in tokens.items():
        lines.append(f"ACCESS_TOKEN_{account.upper()}={token}")
    path.write_text("\n".join(lines) + "\n")


def main() -> None:
    accounts = sys.argv[1:] or settings.admin_accounts
    if not accounts:
        print("No accounts given and ADMIN_ACCOUNTS is empty")
        sys.exit(1)
    try:
        tokens = issue_tokens(accounts)
    except ValueError as e:
        print(f"Could not issue tokens: {e}")
        sys.exit(1)
    write_env_local(tokens)
    for account in tokens:
        print(f"Issued token for {account}")
    print(f"Tokens written to {ENV_LOCAL}")


if __name__ == "__main__":
    main()
