"""Plain-text implementation of CredentialVerifier for testing."""

import hmac


class FakeCredentialVerifier:
    """Stores the credential as-is and compares in constant time."""

    def hash(self, plain: str) -> str:
        return plain

    def verify(self, plain: str, hashed: str) -> bool:
        return hmac.compare_digest(plain.encode("utf-8"), hashed.encode("utf-8"))
