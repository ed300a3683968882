from datetime import timedelta

import pytest

from src.subnft.services.auth_service import AuthService
from tests.helpers import ALICE


def test_token_round_trip_normalises_account():
    service = AuthService(secret_key="secret")
    token = service.create_access_token(ALICE.upper().replace("0X", "0x"))
    assert service.verify_token(token) == ALICE


def test_expired_token_is_rejected():
    service = AuthService(secret_key="secret")
    token = service.create_access_token(ALICE, expires_delta=timedelta(seconds=-1))
    with pytest.raises(ValueError):
        service.verify_token(token)


def test_foreign_signature_is_rejected():
    token = AuthService(secret_key="one").create_access_token(ALICE)
    with pytest.raises(ValueError):
        AuthService(secret_key="two").verify_token(token)


def test_malformed_account_cannot_get_a_token():
    with pytest.raises(ValueError):
        AuthService(secret_key="secret").create_access_token("alice")
