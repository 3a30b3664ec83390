"""
Tests for signed OAuth state tokens.
"""

import re
from unittest.mock import patch

import pytest

from connectors.errors import InvalidStateError
from connectors.state import StatePayload, StateSigner


def _flip(token: str, index: int) -> str:
    replacement = "A" if token[index] != "A" else "B"
    return token[:index] + replacement + token[index + 1:]


class TestStateSigner:
    def test_round_trip(self, signer):
        payload = StatePayload(user_id="123", back_to_url="https://monday.com/boards/1")
        assert signer.verify(signer.issue(payload)) == payload

    def test_round_trip_keeps_provider_and_extra(self, signer):
        payload = StatePayload(
            user_id="u-1",
            back_to_url="https://x.monday.com/?a=1&b=2",
            provider="github",
            extra={"accountId": "77"},
        )
        assert signer.verify(signer.issue(payload), provider="github") == payload

    def test_token_is_url_safe(self, signer):
        token = signer.issue(
            StatePayload(user_id="ü/+?", back_to_url="https://monday.com/?q=a b&c=/")
        )
        assert re.fullmatch(r"[A-Za-z0-9_\-]+\.[0-9a-f]{64}", token)

    @pytest.mark.parametrize("where", ["payload", "signature"])
    def test_single_character_tamper_is_rejected(self, signer, where):
        token = signer.issue(StatePayload(user_id="123", back_to_url="https://monday.com"))
        index = 3 if where == "payload" else len(token) - 1
        with pytest.raises(InvalidStateError):
            signer.verify(_flip(token, index))

    def test_wrong_secret_is_rejected(self, signer):
        token = StateSigner("another-secret").issue(
            StatePayload(user_id="123", back_to_url="https://monday.com")
        )
        with pytest.raises(InvalidStateError):
            signer.verify(token)

    @pytest.mark.parametrize("token", [None, "", "no-dot", "a.b.c", "!!!.deadbeef"])
    def test_malformed_is_rejected(self, signer, token):
        with pytest.raises(InvalidStateError):
            signer.verify(token)

    def test_expired_is_rejected(self, signer):
        token = signer.issue(StatePayload(user_id="123", back_to_url="https://monday.com"))
        with patch("connectors.state.time.time", return_value=10**12):
            with pytest.raises(InvalidStateError):
                signer.verify(token)

    def test_provider_binding(self, signer):
        token = signer.issue(
            StatePayload(user_id="123", back_to_url="https://monday.com", provider="monday")
        )
        with pytest.raises(InvalidStateError):
            signer.verify(token, provider="github")

    def test_error_message_does_not_leak_reason(self, signer):
        with pytest.raises(InvalidStateError) as info:
            signer.verify("abc.def")
        assert info.value.public_message == "Invalid or expired OAuth state."
        assert info.value.status_code == 401

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            StateSigner("")
