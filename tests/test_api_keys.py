"""
Tests for API-key credential logic.
"""

import pytest

from connectors.errors import NotFoundError, ValidationError
from core.api_keys import KEY_MASK, ApiKeyService, mask_key


class TestMaskKey:
    def test_reveals_first_and_last_four(self):
        masked = mask_key("abcd1234EFGH")
        assert masked.startswith("abcd")
        assert masked.endswith("EFGH")
        assert masked == "abcd" + KEY_MASK + "EFGH"

    def test_mask_width_is_independent_of_key_length(self):
        short = mask_key("abcd1EFGH")
        long = mask_key("abcd" + "x" * 200 + "EFGH")
        assert short[4:-4] == long[4:-4] == KEY_MASK

    @pytest.mark.parametrize("key", ["k1", "12345678"])
    def test_short_keys_reveal_nothing(self, key):
        assert mask_key(key) == KEY_MASK


@pytest.fixture
def api_keys(connection_service) -> ApiKeyService:
    return ApiKeyService(connection_service)


class TestApiKeyService:
    @pytest.mark.asyncio
    async def test_status_not_found_for_fresh_user(self, api_keys):
        with pytest.raises(NotFoundError) as info:
            await api_keys.get_status("u1")
        assert info.value.public_message == "API Key not found."

    @pytest.mark.asyncio
    async def test_save_then_status(self, api_keys):
        await api_keys.save("u1", "  abcd1234EFGH ")
        assert await api_keys.get_status("u1") == {
            "connected": True,
            "maskedKey": "abcd" + KEY_MASK + "EFGH",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", [None, "", "   ", 42])
    async def test_save_rejects_missing_key(self, api_keys, key):
        with pytest.raises(ValidationError):
            await api_keys.save("u1", key)

    @pytest.mark.asyncio
    async def test_delete_keeps_oauth_tokens(self, api_keys, connection_service):
        await connection_service.upsert("u1", github_token="g", monday_token="m")
        await api_keys.save("u1", "abcd1234EFGH")
        await api_keys.delete("u1")
        conn = await connection_service.get_by_user_id("u1")
        assert conn.api_key is None
        assert conn.github_token == "g"
        assert conn.monday_token == "m"

    @pytest.mark.asyncio
    async def test_delete_without_key_succeeds(self, api_keys):
        await api_keys.delete("u1")
        with pytest.raises(NotFoundError):
            await api_keys.get_status("u1")
