"""
Tests for admin token helpers and password hashing.
"""
from datetime import timedelta

from quiz_kiosk.models.admin import hash_password
from quiz_kiosk.utils.jwt_utils import create_access_token, decode_access_token


class TestTokens:
    def test_round_trip_claims(self):
        token = create_access_token({"sub": "admin1", "role": "admin"})
        payload = decode_access_token(token)

        assert payload["sub"] == "admin1"
        assert payload["role"] == "admin"
        assert payload["exp"] > payload["iat"]

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "admin1"}, expires_delta=timedelta(seconds=-1))
        assert decode_access_token(token) is None

    def test_garbage_rejected(self):
        assert decode_access_token("not.a.token") is None


class TestPasswords:
    def test_sha256_hex(self):
        digest = hash_password("password123")
        assert len(digest) == 64
        assert digest == hash_password("password123")
        assert digest != hash_password("password124")
