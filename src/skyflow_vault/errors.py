"""Exception hierarchy for the vault client.

Every failure the client can report is a subclass of ``SkyflowError`` so
callers can catch everything with one clause, or branch on the concrete
type when they need to tell conditions apart. Messages are for humans;
the type is the contract.
"""

from __future__ import annotations

from typing import Any, Optional

SDK_ERROR_CODE = 400


class SkyflowError(Exception):
    """Base exception for all vault client errors.

    Attributes:
        message: Human-readable error message
        code: HTTP-like status code. Client-side failures use 400, vault
            failures carry the code the vault reported.
    """

    def __init__(self, message: str, code: Optional[Any] = SDK_ERROR_CODE):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(SkyflowError):
    """Raised when the vault connection details are missing or unusable."""


class EmptyVaultURLError(ConfigurationError):
    pass


class EmptyVaultIDError(ConfigurationError):
    pass


class InvalidVaultURLError(ConfigurationError):
    pass


class MissingTokenProviderError(ConfigurationError):
    pass


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class ValidationError(SkyflowError):
    """
    Base exception for malformed caller input.

    Raised before any network call is made. Each concrete condition has its
    own subclass so callers can react to, say, a missing table differently
    from an empty column name without parsing messages.
    """


class MissingRecordsError(ValidationError):
    """The input mapping has no ``records`` key."""


class EmptyRecordsError(ValidationError):
    """The ``records`` collection is empty."""


class InvalidRecordsError(ValidationError):
    """The ``records`` collection or one of its entries has the wrong type."""


class MissingTableError(ValidationError):
    pass


class EmptyTableNameError(ValidationError):
    pass


class MissingFieldsError(ValidationError):
    pass


class EmptyFieldsError(ValidationError):
    pass


class EmptyColumnNameError(ValidationError):
    pass


class MissingTokenError(ValidationError):
    pass


class EmptyTokenError(ValidationError):
    pass


class MissingIdsError(ValidationError):
    pass


class EmptyIdsError(ValidationError):
    pass


class EmptyIdError(ValidationError):
    pass


class MissingRedactionError(ValidationError):
    pass


class InvalidRedactionTypeError(ValidationError):
    pass


class EmptyConnectionURLError(ValidationError):
    pass


class InvalidConnectionURLError(ValidationError):
    pass


class InvalidQueryParamError(ValidationError):
    """A connection query parameter is not a str, int, float or bool.

    Attributes:
        param: Name of the offending query parameter
    """

    def __init__(self, message: str, param: str):
        super().__init__(message)
        self.param = param


# ---------------------------------------------------------------------------
# Runtime failures
# ---------------------------------------------------------------------------


class TokenProviderError(SkyflowError):
    """Raised when the bearer token provider fails or returns nothing."""


class SerializationError(SkyflowError):
    """Raised when a payload cannot be encoded or a response is not JSON."""


class TransportError(SkyflowError):
    """Raised on network-level failures (connect, read, timeout)."""

    def __init__(self, message: str):
        super().__init__(message, code=None)


class VaultError(SkyflowError):
    """
    Raised when the vault answers with an error body or a non-2xx status.

    The vault's reported code and message are kept verbatim.

    Attributes:
        http_code: Status code reported by the vault
        vault_message: Message reported by the vault
        request_id: ``x-request-id`` header of the failing response, if any
    """

    def __init__(
        self,
        http_code: Any,
        vault_message: str,
        request_id: Optional[str] = None,
    ):
        super().__init__(f"Server returned error: {vault_message}", code=http_code)
        self.http_code = http_code
        self.vault_message = vault_message
        self.request_id = request_id


class MalformedResponseError(SkyflowError):
    """Raised when the vault's JSON does not have the documented shape."""
