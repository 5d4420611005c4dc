"""Token service — RS256 JWT issuance and verification.

The key pair is loaded once at startup and is read-only afterwards, so a
single TokenService is shared by all concurrent requests.
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from jose import JWTError, jwk, jwt
from jose.exceptions import JWKError, JWTClaimsError

from domain.model.errors import (
    ExpiredTokenError,
    InvalidSignatureError,
    KeyLoadError,
    MalformedTokenError,
)

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "RS256"
DEFAULT_TOKEN_TTL = timedelta(hours=24)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _read_key(path: str | Path, label: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise KeyLoadError(f"Cannot read {label} key file {path}: {e}") from e


def _construct_key(pem: str, label: str):
    try:
        return jwk.construct(pem, algorithm=JWT_ALGORITHM)
    except (JWKError, ValueError, TypeError) as e:
        raise KeyLoadError(f"Malformed {label} key: {e}") from e


class TokenService:
    """Issues and verifies bearer tokens carrying a user's email as subject."""

    def __init__(
        self,
        public_key_pem: str,
        private_key_pem: str,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Callable[[], datetime] = _utc_now,
    ):
        public_key = _construct_key(public_key_pem, "public")
        private_key = _construct_key(private_key_pem, "private")
        if not public_key.is_public():
            raise KeyLoadError("Public key file holds a private key")
        if private_key.is_public():
            raise KeyLoadError("Private key file holds a public key")

        self._public_key_pem = public_key_pem
        self._private_key_pem = private_key_pem
        self.ttl = ttl
        self._clock = clock

    @classmethod
    def from_files(
        cls,
        public_key_path: str | Path,
        private_key_path: str | Path,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Callable[[], datetime] = _utc_now,
    ) -> "TokenService":
        """Load the key pair from two PEM files.

        Raises:
            KeyLoadError: a file is missing, unreadable or not a valid RSA key
        """
        service = cls(
            _read_key(public_key_path, "public"),
            _read_key(private_key_path, "private"),
            ttl=ttl,
            clock=clock,
        )
        logger.info(
            "JWT key pair loaded",
            extra={"publicKeyPath": str(public_key_path), "privateKeyPath": str(private_key_path)},
        )
        return service

    def issue(self, subject: str) -> str:
        """Create a signed token for subject, valid for ttl from now."""
        now = self._clock()
        payload = {
            "sub": subject,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        return jwt.encode(payload, self._private_key_pem, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> str:
        """Verify token and return its subject.

        Raises:
            MalformedTokenError: not a JWT, or sub/exp claims missing or mistyped
            InvalidSignatureError: signature does not match the public key
            ExpiredTokenError: exp is not after the current time
        """
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError as e:
            raise MalformedTokenError(str(e)) from e

        subject = claims.get("sub")
        expires_at = claims.get("exp")
        if not isinstance(subject, str):
            raise MalformedTokenError("Subject claim missing or not a string")
        if not isinstance(expires_at, int) or isinstance(expires_at, bool):
            raise MalformedTokenError("Expiry claim missing or not an integer")

        try:
            # expiry is checked below against the injected clock
            jwt.decode(
                token,
                self._public_key_pem,
                algorithms=[JWT_ALGORITHM],
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTClaimsError as e:
            raise MalformedTokenError(str(e)) from e
        except JWTError as e:
            raise InvalidSignatureError(str(e)) from e

        if expires_at <= int(self._clock().timestamp()):
            raise ExpiredTokenError("Token has expired")

        return subject
