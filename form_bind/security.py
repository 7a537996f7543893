"""CSRF protection of secured root mappings.

A secret is generated when a secured form is filled and kept in the
server side storage under the root mapping path. The token derived from it
is rendered in the ``formAuthToken`` field and verified when the form is
bound; the secret is deleted after verification.
"""

import hashlib
import logging
import secrets
import threading
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from form_bind.errors import MappingConfigurationError
from form_bind.params import RequestParams
from form_bind.paths import AUTH_TOKEN_FIELD_NAME, PATH_SEP

logger = logging.getLogger(__name__)

SECRET_KEY_PREFIX = "formbind_secret_"
SECRET_LENGTH = 20
TOKEN_PART_SEPARATOR = "_"
# Maximum token age in milliseconds (6 h)
MAX_TOKEN_AGE_MS = 6 * 60 * 60 * 1000


class TokenError(Exception):
    """Base class for failed verification of an authorization token."""

    pass


class TokenMissingError(TokenError):
    """Raised when a secured form is submitted without a token."""

    pass


class InvalidTokenError(TokenError):
    """Raised when the submitted token does not match the stored secret."""

    pass


@runtime_checkable
class SecretStorage(Protocol):
    """Server side storage of secrets, typically bound to a user session."""

    def set(self, key: str, value: str) -> None:
        ...

    def get(self, key: str) -> str | None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemorySecretStorage:
    """Thread safe secret storage held in process memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._secrets: dict[str, str] = {}

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._secrets[key] = value

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._secrets.get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._secrets.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._secrets)


class RequestContext:
    """Context of the current request for filling and binding secured forms.

    Args:
        storage: Storage of secrets belonging to the current user.
        user_id: Identification of the user mixed into the secret, so a
            token issued for one user is not valid for another.
    """

    def __init__(self, storage: SecretStorage, user_id: str = "") -> None:
        if storage is None:
            raise MappingConfigurationError("Secret storage must exist to store CSRF tokens")
        self.storage = storage
        self.user_id = user_id

    def secret_with_user_identification(self, secret: str | None) -> str:
        if not secret:
            return ""
        return f"{secret}{self.user_id}"


def _now_ms() -> int:
    return int(time.time() * 1000)


class HashTokenAuthorizer:
    """Tokens of the form ``sha256(secret + time)_time``, valid for 6 hours."""

    def __init__(self, max_age_ms: int = MAX_TOKEN_AGE_MS, clock: Callable[[], int] = _now_ms) -> None:
        self.max_age_ms = max_age_ms
        self.clock = clock

    def generate_token(self, secret: str) -> str:
        if not secret:
            raise ValueError("secret cannot be empty")
        return self._token_from_secret_and_time(secret, self.clock())

    def is_valid_token(self, token: str | None, secret: str | None) -> bool:
        if not token or not secret:
            return False
        token_time = self._time_from_token(token)
        if not secrets.compare_digest(token, self._token_from_secret_and_time(secret, token_time)):
            return False
        return abs(self.clock() - token_time) <= self.max_age_ms

    def validate_token(self, token: str | None, secret: str | None) -> None:
        """Check a token.

        Raises:
            InvalidTokenError: If the token is forged or expired.
        """
        if not self.is_valid_token(token, secret):
            raise InvalidTokenError("Invalid authorization token. Maybe this is a blocked CSRF attempt.")

    @staticmethod
    def _token_from_secret_and_time(secret: str, token_time: int) -> str:
        digest = hashlib.sha256(f"{secret}{token_time}".encode("utf-8")).hexdigest()
        return f"{digest}{TOKEN_PART_SEPARATOR}{token_time}"

    @staticmethod
    def _time_from_token(token: str) -> int:
        _, _, time_str = token.rpartition(TOKEN_PART_SEPARATOR)
        try:
            return int(time_str)
        except ValueError:
            return 0


def secret_key(root_path: str) -> str:
    return SECRET_KEY_PREFIX + root_path


def generate_auth_token(context: RequestContext | None, authorizer: HashTokenAuthorizer, root_path: str) -> str:
    """Generate a token for a secured root mapping and store its secret.

    Raises:
        MappingConfigurationError: If no request context is given.
    """
    if context is None:
        raise MappingConfigurationError(
            "RequestContext is required when the form is defined as secured. "
            "Please pass a context to fill."
        )
    secret = secrets.token_urlsafe(SECRET_LENGTH)
    context.storage.set(secret_key(root_path), secret)
    return authorizer.generate_token(context.secret_with_user_identification(secret))


def verify_auth_token(
    context: RequestContext | None,
    authorizer: HashTokenAuthorizer,
    root_path: str,
    params: RequestParams,
) -> None:
    """Verify the token submitted for a secured root mapping.

    The stored secret is deleted afterwards, so a token is usable once.

    Raises:
        MappingConfigurationError: If no request context is given.
        TokenMissingError: If no token was submitted.
        InvalidTokenError: If the token is not valid.
    """
    if context is None:
        raise MappingConfigurationError(
            "RequestContext is required when the form is defined as secured. "
            "Please pass a context to bind."
        )
    key = secret_key(root_path)
    try:
        token = params.value(f"{root_path}{PATH_SEP}{AUTH_TOKEN_FIELD_NAME}") or ""
        if not token:
            logger.warning("Authorization token of form %s is missing", root_path)
            raise TokenMissingError(
                f"Unauthorized attempt. Authorization token is missing! It should be posted as "
                f"{AUTH_TOKEN_FIELD_NAME} field."
            )
        secret = context.secret_with_user_identification(context.storage.get(key))
        try:
            authorizer.validate_token(token, secret)
        except InvalidTokenError:
            logger.warning("Invalid authorization token of form %s", root_path)
            raise
    finally:
        context.storage.delete(key)
