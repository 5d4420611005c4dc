"""User service — registration, login and profile-change business logic.

Pure business logic with no HTTP dependencies. Internal helpers raise domain
errors; each public operation maps them to a fixed OperationResult so the
transport only writes out status and body.
"""

import functools
import logging
from http import HTTPStatus

from domain.model.errors import CredentialError, DomainError, DuplicateError, ValidationError
from domain.model.result import OperationResult
from domain.model.user import User
from port.credential_verifier import CredentialVerifier
from port.user_repository import UserRepository
from services.token_service import TokenService
from services.validation import (
    validate_cake,
    validate_email,
    validate_password,
    validate_registration,
)

logger = logging.getLogger(__name__)

NO_SUCH_USER = "there is no such user"
INVALID_LOGIN = "invalid login params"
EMAIL_TAKEN = "email already registered"

REGISTERED = "registered"
CAKE_CHANGED = "cake successful changed"
EMAIL_CHANGED = "email successful changed"
PASSWORD_CHANGED = "password successful changed"

_ERROR_STATUS = {
    ValidationError: HTTPStatus.UNPROCESSABLE_ENTITY,
    CredentialError: HTTPStatus.UNPROCESSABLE_ENTITY,
    DuplicateError: HTTPStatus.CONFLICT,
}


def _check(result: tuple[bool, str]) -> None:
    is_valid, error_msg = result
    if not is_valid:
        raise ValidationError(error_msg)


def _operation(func):
    """Translate domain errors raised by func into an OperationResult."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> OperationResult:
        try:
            return func(*args, **kwargs)
        except DomainError as e:
            status = _ERROR_STATUS.get(type(e))
            if status is None:
                raise
            logger.info(
                "User operation rejected",
                extra={"operation": func.__name__, "error": type(e).__name__, "reason": e.message},
            )
            return OperationResult(status, e.message)
    return wrapper


class UserService:
    def __init__(
        self,
        repo: UserRepository,
        token_service: TokenService,
        credentials: CredentialVerifier,
    ):
        self.repo = repo
        self.token_service = token_service
        self.credentials = credentials

    def _login(self, email: str, password: str) -> User:
        """Return the user for email if password matches.

        Raises:
            CredentialError: unknown email, or wrong password
        """
        user = self.repo.get(email)
        if user is None:
            raise CredentialError(NO_SUCH_USER)
        if not self.credentials.verify(password, user.password_hash):
            raise CredentialError(INVALID_LOGIN)
        return user

    @_operation
    def register(self, email: str, password: str, favorite_cake: str) -> OperationResult:
        """Register a new user.

        Validation stops at the first failing rule. An email that is already
        registered is rejected rather than overwritten.
        """
        _check(validate_registration(email, password, favorite_cake))

        password_hash = self.credentials.hash(password)
        with self.repo.locked():
            if self.repo.get(email) is not None:
                raise DuplicateError(EMAIL_TAKEN)
            self.repo.save(User(email=email, password_hash=password_hash, favorite_cake=favorite_cake))

        logger.info("User registered", extra={"email": email})
        return OperationResult(HTTPStatus.CREATED, REGISTERED)

    @_operation
    def authenticate(self, email: str, password: str) -> OperationResult:
        """Check credentials and return a signed token as the body."""
        user = self._login(email, password)
        token = self.token_service.issue(user.email)
        logger.info("Token issued", extra={"email": user.email})
        return OperationResult(HTTPStatus.OK, token)

    @_operation
    def show_my_cake(self, email: str, password: str) -> OperationResult:
        user = self._login(email, password)
        return OperationResult(HTTPStatus.OK, user.favorite_cake)

    def _current(self, verified: User) -> User:
        """Re-read a verified user under the repository lock.

        Must be called inside repo.locked(). The credential check runs
        outside the lock, so the record may have moved since: a changed
        password rejects the caller, a vanished email means no such user.

        Raises:
            CredentialError: record renamed away or password changed
        """
        user = self.repo.get(verified.email)
        if user is None:
            raise CredentialError(NO_SUCH_USER)
        if user.password_hash != verified.password_hash:
            raise CredentialError(INVALID_LOGIN)
        return user

    @_operation
    def change_cake(self, email: str, password: str, new_cake: str) -> OperationResult:
        verified = self._login(email, password)
        _check(validate_cake(new_cake))

        with self.repo.locked():
            user = self._current(verified)
            user.favorite_cake = new_cake
            self.repo.save(user)

        logger.info("Favorite cake changed", extra={"email": email})
        return OperationResult(HTTPStatus.OK, CAKE_CHANGED)

    @_operation
    def change_email(self, email: str, password: str, new_email: str) -> OperationResult:
        """Move the user to new_email. The old email no longer resolves."""
        verified = self._login(email, password)
        _check(validate_email(new_email))

        with self.repo.locked():
            user = self._current(verified)
            if new_email != email and self.repo.get(new_email) is not None:
                raise DuplicateError(EMAIL_TAKEN)
            user.email = new_email
            self.repo.save(user, previous_email=email)

        return OperationResult(HTTPStatus.OK, EMAIL_CHANGED)

    @_operation
    def change_password(self, email: str, password: str, new_password: str) -> OperationResult:
        verified = self._login(email, password)
        _check(validate_password(new_password))
        new_hash = self.credentials.hash(new_password)

        with self.repo.locked():
            user = self._current(verified)
            user.password_hash = new_hash
            self.repo.save(user)

        logger.info("Password changed", extra={"email": email})
        return OperationResult(HTTPStatus.OK, PASSWORD_CHANGED)
