"""Port definition for CredentialVerifier."""

from typing import Protocol


class CredentialVerifier(Protocol):
    def hash(self, plain: str) -> str: ...
    def verify(self, plain: str, hashed: str) -> bool: ...
