"""Test configuration and fixtures for the authorization server.

Every test gets a fresh in-memory storage with the sample clients registered,
a controllable clock, and an AuthorizationServer wired to both.
"""

from collections.abc import Callable, Generator
from urllib.parse import parse_qs, urlsplit

import pytest

from oauth_core.core.auth.oauth2 import (
    AuthorizationServer,
    InMemoryStorage,
    StaticResourceOwner,
)
from oauth_core.core.config import Settings, clear_settings_cache
from oauth_core.schemas.oauth import ApprovalDecision, AuthorizeRequest
from tests.fixtures.test_data import ALL_CLIENTS, SUPPORTED_SCOPES, FakeClock


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset cached settings between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def clock() -> FakeClock:
    """Controllable clock shared by server and verifier."""
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Server settings used by most tests."""
    return Settings(
        allow_unregistered_clients=True,
        allow_all_scopes=False,
        supported_scopes=SUPPORTED_SCOPES,
        admin_resource_owner_ids=["admin"],
        access_token_expiry=3600,
    )


@pytest.fixture
def storage() -> InMemoryStorage:
    """Storage with the sample clients registered."""
    store = InMemoryStorage()
    for client in ALL_CLIENTS:
        store.add_client(client)
    return store


@pytest.fixture
def server(
    storage: InMemoryStorage, settings: Settings, clock: FakeClock
) -> AuthorizationServer:
    """Authorization server under test."""
    return AuthorizationServer(storage, settings, clock=clock)


@pytest.fixture
def resource_owner() -> StaticResourceOwner:
    """Regular resource owner."""
    return StaticResourceOwner("alice", "Alice")


@pytest.fixture
def admin_owner() -> StaticResourceOwner:
    """Resource owner listed as administrator."""
    return StaticResourceOwner("admin", "Administrator")


@pytest.fixture
def approve_and_redirect(
    server: AuthorizationServer, resource_owner: StaticResourceOwner
) -> Callable[..., dict[str, list[str]]]:
    """Approve a request and return the parsed redirect parameters."""

    def _approve(**params: str) -> dict[str, list[str]]:
        request = AuthorizeRequest.from_params(params)
        decision = ApprovalDecision(scope=request.scope, approval="Approve")
        result = server.approve(resource_owner, request, decision)
        assert result.is_ok(), result
        url = urlsplit(result.unwrap().url)
        return parse_qs(url.fragment or url.query)

    return _approve
