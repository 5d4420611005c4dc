"""Domain-level exceptions.

Services raise these errors to express business rule violations.
The operation boundary (UserService, AuthMiddleware) catches them and maps
them to a fixed status code and body.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainError):
    """Input violates a business validation rule."""


class CredentialError(DomainError):
    """Unknown user or wrong credential."""


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""


class AuthError(DomainError):
    """Request carries no usable bearer token."""

    def __init__(self, reason: str = "unauthorized"):
        # reason is for logs only; callers always see "unauthorized"
        self.reason = reason
        super().__init__("unauthorized")


class TokenError(DomainError):
    """Base class for token verification failures."""


class MalformedTokenError(TokenError):
    """Token cannot be parsed into the expected structure."""


class InvalidSignatureError(TokenError):
    """Token signature does not match the public key."""


class ExpiredTokenError(TokenError):
    """Token expiry is in the past."""


class KeyLoadError(Exception):
    """Key material is unreadable or malformed. Fatal at startup."""
