import pytest

from src.subnft.core.pbac import check_policy, load_policies, roles_for
from tests.helpers import ADMIN, ALICE


def test_policies_file_is_loaded():
    assert load_policies()["policies"]


def test_admins_hold_both_roles():
    assert roles_for(ADMIN) == ["admin", "subscriber"]
    assert roles_for(ALICE) == ["subscriber"]


@pytest.mark.parametrize(
    "account, action, resource, allowed",
    [
        (ADMIN, "create", "plans", True),
        (ADMIN, "update", "plans", True),
        (ADMIN, "create", "subscriptions", True),
        (ALICE, "create", "plans", False),
        (ALICE, "update", "plans", False),
        (ALICE, "create", "subscriptions", True),
        (ALICE, "update", "subscriptions", True),
        (ALICE, "create", "ledger", True),
        (ALICE, "delete", "subscriptions", False),
    ],
)
def test_check_policy(account, action, resource, allowed):
    assert check_policy(account, action, resource) is allowed
