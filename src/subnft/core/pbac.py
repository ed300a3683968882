import logging
import os
from functools import lru_cache
from typing import Annotated, Dict, List

from fastapi import Depends, HTTPException, status
from pydantic import BaseModel
from yaml import safe_load

from src.subnft.api.auth_deps import get_current_account
from src.subnft.core.config import settings

logger = logging.getLogger(__name__)


# Load policies from YAML file
@lru_cache(maxsize=1)
def load_policies() -> Dict:
    # Try multiple possible paths for policies.yaml
    possible_paths = [
        os.getenv("SUBNFT_POLICIES_FILE", ""),
        "policies.yaml",  # Current directory
        "/app/policies.yaml",  # Docker app directory
        os.path.join(os.path.dirname(__file__), "../../../policies.yaml"),  # Relative to this file
    ]

    for path in possible_paths:
        if path and os.path.exists(path):
            logger.info(f"Loading policies from: {path}")
            with open(path, "r") as f:
                return safe_load(f) or {}

    logger.error(f"policies.yaml not found in any of these paths: {possible_paths}")
    return {}


class Policy(BaseModel):
    roles: List[str]
    actions: List[str]
    resources: List[str]


def roles_for(account: str) -> List[str]:
    """Administrators also hold every subscriber permission."""
    if settings.is_admin(account):
        return ["admin", "subscriber"]
    return ["subscriber"]


def check_policy(account: str, action: str, resource: str) -> bool:
    """Check if account has permission to perform action on resource."""
    policies = load_policies()
    account_roles = roles_for(account)

    logger.info(f"Checking policy for {account} with roles {account_roles}, action: {action}, resource: {resource}")

    # Check each policy
    for policy in policies.get("policies", []):
        policy_obj = Policy(**policy)

        # Check if account has required role
        if not any(role in account_roles for role in policy_obj.roles):
            continue

        # Check if action is allowed
        if action not in policy_obj.actions:
            continue

        # Check if resource is allowed (including wildcard "*")
        if "*" not in policy_obj.resources and resource not in policy_obj.resources:
            continue

        logger.info(f"Policy check passed for {account}")
        return True

    logger.warning(f"No matching policy found for {account}, action: {action}, resource: {resource}")
    return False


def require_permission(action: str, resource: str):
    """Dependency factory requiring a specific permission for an endpoint."""
    async def permission_dependency(
        current_account: Annotated[str, Depends(get_current_account)],
    ) -> str:
        if not check_policy(current_account, action, resource):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied"
            )
        return current_account

    return permission_dependency
