"""
Tests for monday session-token verification and at-rest encryption.
"""

import time

import jwt as pyjwt
import pytest
from cryptography.fernet import Fernet

from auth.jwt import MondaySession, SessionVerifier
from connectors.encryption import CIPHERTEXT_PREFIX, TokenCipher
from connectors.errors import AuthenticationError

SECRET = "monday-signing-secret-0123456789abcdef"


class TestSessionVerifier:
    def test_regular_session_token(self):
        token = pyjwt.encode(
            {"userId": 42, "accountId": 7, "backToUrl": "https://monday.com/b"},
            SECRET,
            algorithm="HS256",
        )
        assert SessionVerifier(SECRET).verify(token) == MondaySession(
            user_id="42", account_id="7", back_to_url="https://monday.com/b"
        )

    def test_short_lived_token(self):
        token = pyjwt.encode(
            {"dat": {"user_id": 5, "account_id": 9}, "aud": "https://app.example.com"},
            SECRET,
            algorithm="HS256",
        )
        session = SessionVerifier(SECRET).verify(token)
        assert session.user_id == "5"
        assert session.account_id == "9"

    def test_expired_token(self):
        token = pyjwt.encode(
            {"userId": 1, "exp": int(time.time()) - 60}, SECRET, algorithm="HS256"
        )
        with pytest.raises(AuthenticationError):
            SessionVerifier(SECRET).verify(token)

    def test_token_without_user(self):
        token = pyjwt.encode({"accountId": 1}, SECRET, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            SessionVerifier(SECRET).verify(token)

    def test_unconfigured_secret_rejects(self):
        token = pyjwt.encode({"userId": 1}, SECRET, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            SessionVerifier("").verify(token)


class TestTokenCipher:
    def test_round_trip_is_prefixed(self):
        cipher = TokenCipher([Fernet.generate_key().decode()])
        stored = cipher.encrypt('{"userId": "1"}')
        assert stored.startswith(CIPHERTEXT_PREFIX)
        assert cipher.decrypt(stored) == '{"userId": "1"}'

    def test_key_rotation(self):
        old, new = Fernet.generate_key().decode(), Fernet.generate_key().decode()
        stored = TokenCipher([old]).encrypt("secret")
        assert TokenCipher([new, old]).decrypt(stored) == "secret"

    def test_wrong_key_fails_closed(self):
        stored = TokenCipher([Fernet.generate_key().decode()]).encrypt("secret")
        with pytest.raises(ValueError):
            TokenCipher([Fernet.generate_key().decode()]).decrypt(stored)

    def test_disabled_cipher_passes_plaintext(self):
        cipher = TokenCipher([])
        assert not cipher.enabled
        assert cipher.encrypt("x") == "x"
        assert cipher.decrypt("x") == "x"
        with pytest.raises(ValueError):
            cipher.decrypt(CIPHERTEXT_PREFIX + "abc")
