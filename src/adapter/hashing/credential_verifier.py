"""bcrypt implementation of CredentialVerifier."""

import bcrypt

BCRYPT_ROUNDS = 12
# bcrypt only reads the first 72 bytes; newer releases raise instead of truncating
_MAX_PASSWORD_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_MAX_PASSWORD_BYTES]


class BcryptCredentialVerifier:
    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(plain), salt).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
