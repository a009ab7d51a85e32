class ConfigurationError(Exception):
    """Raised when the auth core is missing a key or a required setting."""
    pass


class AuthenticationError(Exception):
    """Raised when authentication fails."""
    pass


class MalformedTokenError(AuthenticationError):
    """Raised when a token does not have the expected structure."""
    pass


class TokenDecodeError(MalformedTokenError):
    """Raised when a signed token segment cannot be decoded or parsed."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when the token signature or validity window is rejected."""
    pass


class TokenNotYetValidError(InvalidCredentialsError):
    """Raised when a token is presented before its issue time."""
    pass


class TokenExpiredError(InvalidCredentialsError):
    """Raised when token has expired."""
    pass


class InvalidEntityError(ValueError):
    """Raised when a field carries a value that is not allowed."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"on field {field!r}: field is not valid: {reason}")
        self.field = field
        self.reason = reason


class NotFoundError(LookupError):
    """Raised when no key record matches the request."""

    def __init__(self, name: str) -> None:
        super().__init__(f"could not find any record matching {name!r}")
        self.name = name


class StorageError(Exception):
    """
    Raised for any key storage failure other than a missing record.

    The message names the operation and the record, never the key bytes.
    """

    def __init__(self, operation: str, name: str, reason: str) -> None:
        super().__init__(f"failed to {operation} record {name!r}: {reason}")
        self.operation = operation
        self.name = name
        self.reason = reason


class KeyDecodeError(StorageError):
    """Raised when a stored record does not hold a valid Ed25519 private key."""
    pass
