import re

ACCOUNT_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_valid_account(account: str) -> bool:
    return bool(ACCOUNT_PATTERN.match(account))


def normalize_account(account: str) -> str:
    """Lower-case a 0x-prefixed 20 byte hex address, ValueError if malformed."""
    account = account.strip()
    if not is_valid_account(account):
        raise ValueError(f"Invalid account address: {account}")
    return account.lower()
