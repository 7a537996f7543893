"""Tests for CSRF tokens of secured forms."""

import pytest

from form_bind import (
    InMemorySecretStorage,
    InvalidTokenError,
    MapParams,
    RequestContext,
    TokenMissingError,
)
from form_bind.errors import MappingConfigurationError
from form_bind.security import (
    MAX_TOKEN_AGE_MS,
    HashTokenAuthorizer,
    SecretStorage,
    generate_auth_token,
    secret_key,
    verify_auth_token,
)

from conftest import FixedClock


class TestHashTokenAuthorizer:
    """Tests for generating and checking tokens."""

    def test_token_contains_time(self, authorizer: HashTokenAuthorizer, clock: FixedClock) -> None:
        """Tokens end with the generation time."""
        token = authorizer.generate_token("secret")
        assert token.endswith(f"_{clock.now_ms}")

    def test_valid_token(self, authorizer: HashTokenAuthorizer) -> None:
        """A token is valid for its own secret."""
        token = authorizer.generate_token("secret")
        assert authorizer.is_valid_token(token, "secret")
        assert not authorizer.is_valid_token(token, "other")

    def test_expired_token(self, authorizer: HashTokenAuthorizer, clock: FixedClock) -> None:
        """Tokens older than six hours are rejected."""
        token = authorizer.generate_token("secret")
        clock.now_ms += MAX_TOKEN_AGE_MS
        assert authorizer.is_valid_token(token, "secret")
        clock.now_ms += 1
        assert not authorizer.is_valid_token(token, "secret")

    def test_forged_time(self, authorizer: HashTokenAuthorizer) -> None:
        """Changing the time part breaks the hash."""
        digest, _, token_time = authorizer.generate_token("secret").rpartition("_")
        forged = f"{digest}_{int(token_time) + 1}"
        with pytest.raises(InvalidTokenError):
            authorizer.validate_token(forged, "secret")

    def test_missing_parts(self, authorizer: HashTokenAuthorizer) -> None:
        """Empty tokens and secrets are never valid."""
        assert not authorizer.is_valid_token("", "secret")
        assert not authorizer.is_valid_token("abc", None)
        assert not authorizer.is_valid_token("garbage", "secret")

    def test_empty_secret_cannot_sign(self, authorizer: HashTokenAuthorizer) -> None:
        """A secret is needed to generate a token."""
        with pytest.raises(ValueError):
            authorizer.generate_token("")


class TestTokenRoundTrip:
    """Tests for storing secrets and verifying submitted tokens."""

    def test_generate_and_verify(
        self, context: RequestContext, storage: InMemorySecretStorage, authorizer: HashTokenAuthorizer
    ) -> None:
        """A rendered token verifies once and its secret is deleted."""
        token = generate_auth_token(context, authorizer, "f")
        assert storage.get(secret_key("f")) is not None
        verify_auth_token(context, authorizer, "f", MapParams({"f-formAuthToken": token}))
        assert len(storage) == 0

    def test_token_is_single_use(self, context: RequestContext, authorizer: HashTokenAuthorizer) -> None:
        """The second submission has no secret to verify against."""
        token = generate_auth_token(context, authorizer, "f")
        params = MapParams({"f-formAuthToken": token})
        verify_auth_token(context, authorizer, "f", params)
        with pytest.raises(InvalidTokenError):
            verify_auth_token(context, authorizer, "f", params)

    def test_missing_token(
        self, context: RequestContext, storage: InMemorySecretStorage, authorizer: HashTokenAuthorizer
    ) -> None:
        """No token is a missing token error and the secret is dropped."""
        generate_auth_token(context, authorizer, "f")
        with pytest.raises(TokenMissingError):
            verify_auth_token(context, authorizer, "f", MapParams({"f-name": "x"}))
        assert len(storage) == 0

    def test_token_of_other_user(self, storage: InMemorySecretStorage, authorizer: HashTokenAuthorizer) -> None:
        """Tokens are bound to the user identification."""
        token = generate_auth_token(RequestContext(storage, "alice"), authorizer, "f")
        with pytest.raises(InvalidTokenError):
            verify_auth_token(RequestContext(storage, "bob"), authorizer, "f", MapParams({"f-formAuthToken": token}))

    def test_context_is_required(self, authorizer: HashTokenAuthorizer) -> None:
        """Secured forms cannot be used without request context."""
        with pytest.raises(MappingConfigurationError):
            generate_auth_token(None, authorizer, "f")
        with pytest.raises(MappingConfigurationError):
            verify_auth_token(None, authorizer, "f", MapParams())

    def test_storage_is_required(self) -> None:
        """A context needs a secret storage."""
        with pytest.raises(MappingConfigurationError):
            RequestContext(None)

    def test_in_memory_storage_protocol(self, storage: InMemorySecretStorage) -> None:
        """The in-memory storage is a SecretStorage."""
        assert isinstance(storage, SecretStorage)
        storage.set("k", "v")
        storage.delete("k")
        storage.delete("k")
        assert storage.get("k") is None
