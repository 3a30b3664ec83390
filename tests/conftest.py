"""
Shared fixtures: an in-memory SQLite connection store, a state signer and
test OAuth connectors whose code exchange is scripted per test.
"""

from __future__ import annotations

from typing import Dict, List

import pytest
import pytest_asyncio
from cryptography.fernet import Fernet

from config.settings import Settings
from connectors.base import BaseConnector
from connectors.connection_service import ConnectionService
from connectors.encryption import TokenCipher
from connectors.registry import ConnectorRegistry
from connectors.state import StateSigner
from connectors.store import ConnectionStore
from database.session import build_engine, build_session_factory, create_tables

STATE_SECRET = "test-oauth-state-secret-0123456789abcdef"
SIGNING_SECRET = "test-monday-signing-secret-0123456789abcdef"
ENCRYPTION_KEY = Fernet.generate_key().decode()


class ScriptedConnector(BaseConnector):
    """OAuth connector whose exchange result is looked up by code."""

    def __init__(self, name: str, tokens: Dict[str, str] | None = None):
        super().__init__("client-id", "client-secret", "https://app.example.com")
        self._name = name
        self.tokens = dict(tokens or {})
        self.exchanged: List[str] = []

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def display_name(self) -> str:
        return self._name.title()

    @property
    def scopes(self) -> List[str]:
        return ["read"]

    def get_auth_url(self, state: str) -> str:
        return f"https://{self._name}.example.com/authorize?state={state}"

    async def exchange_code(self, code: str) -> str:
        self.exchanged.append(code)
        if code not in self.tokens:
            raise ValueError(f"bad verification code {code!r}")
        return self.tokens[code]


@pytest.fixture
def signer() -> StateSigner:
    return StateSigner(STATE_SECRET, ttl_seconds=600)


@pytest.fixture
def monday() -> ScriptedConnector:
    return ScriptedConnector("monday", {"m-code": "monday-token"})


@pytest.fixture
def github() -> ScriptedConnector:
    return ScriptedConnector("github", {"g-code": "github-token"})


@pytest.fixture
def registry(monday, github) -> ConnectorRegistry:
    return ConnectorRegistry([monday, github])


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        oauth_state_secret=STATE_SECRET,
        monday_signing_secret=SIGNING_SECRET,
        token_encryption_keys=ENCRYPTION_KEY,
        oauth_redirect_base="https://app.example.com",
        required_providers="monday,github",
        default_back_to_url=None,
    )


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def store(engine) -> ConnectionStore:
    return ConnectionStore(build_session_factory(engine), TokenCipher([ENCRYPTION_KEY]))


@pytest_asyncio.fixture
async def connection_service(store) -> ConnectionService:
    return ConnectionService(store)
