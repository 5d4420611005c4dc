"""Bearer-token authentication for protected operations.

Pure business logic with no HTTP dependencies: the transport hands over the
raw Authorization header value and writes out the returned OperationResult.
"""

import logging
from http import HTTPStatus
from typing import Callable, Protocol

from domain.model.errors import AuthError, TokenError
from domain.model.result import OperationResult
from domain.model.user import User
from port.user_repository import UserRepository
from services.token_service import TokenService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
UNAUTHORIZED = "unauthorized"


class ProtectedOperation(Protocol):
    def __call__(self, user: User) -> OperationResult: ...


def parse_bearer(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` value.

    The scheme match is case-sensitive with exactly one space, so
    fastapi.security.HTTPBearer (case-insensitive) cannot stand in here.

    Raises:
        AuthError: header absent, wrong scheme, or empty/blank token
    """
    if not authorization:
        raise AuthError("missing authorization header")
    if not authorization.startswith(BEARER_PREFIX):
        raise AuthError("authorization scheme is not Bearer")
    token = authorization[len(BEARER_PREFIX):]
    if not token or any(ch.isspace() for ch in token):
        raise AuthError("malformed bearer token")
    return token


def get_cake(user: User) -> OperationResult:
    """Protected read of the caller's favorite cake."""
    return OperationResult(HTTPStatus.OK, user.favorite_cake)


class AuthMiddleware:
    def __init__(self, token_service: TokenService, repo: UserRepository):
        self.token_service = token_service
        self.repo = repo

    def authenticate(self, authorization: str | None) -> User:
        """Resolve the Authorization header to the live user record.

        Raises:
            AuthError: no usable token, token rejected, or subject unknown
        """
        token = parse_bearer(authorization)

        try:
            email = self.token_service.verify(token)
        except TokenError as e:
            raise AuthError(f"{type(e).__name__}: {e}") from e

        user = self.repo.get(email)
        if user is None:
            raise AuthError("token subject not found")
        return user

    def wrap(self, operation: ProtectedOperation) -> Callable[[str | None], OperationResult]:
        """Gate operation behind bearer authentication.

        Every failure collapses into 401 "unauthorized"; the reason is only
        logged.
        """
        def handler(authorization: str | None) -> OperationResult:
            try:
                user = self.authenticate(authorization)
            except AuthError as e:
                logger.debug("Request rejected", extra={"reason": e.reason})
                return OperationResult(HTTPStatus.UNAUTHORIZED, UNAUTHORIZED)
            return operation(user)

        return handler
