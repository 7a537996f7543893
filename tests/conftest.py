"""Pytest configuration and shared fixtures."""

import pytest

from form_bind import Config, InMemorySecretStorage, RequestContext
from form_bind.security import HashTokenAuthorizer


class FixedClock:
    """Clock returning a settable time in milliseconds."""

    def __init__(self, now_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


@pytest.fixture
def config() -> Config:
    """Return the default configuration."""
    return Config()


@pytest.fixture
def storage() -> InMemorySecretStorage:
    """Return an empty secret storage."""
    return InMemorySecretStorage()


@pytest.fixture
def context(storage: InMemorySecretStorage) -> RequestContext:
    """Return a request context of one user."""
    return RequestContext(storage, user_id="user-1")


@pytest.fixture
def clock() -> FixedClock:
    """Return a clock that only moves when told to."""
    return FixedClock()


@pytest.fixture
def authorizer(clock: FixedClock) -> HashTokenAuthorizer:
    """Return a token authorizer driven by the fixed clock."""
    return HashTokenAuthorizer(clock=clock)
