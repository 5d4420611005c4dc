"""Environment-driven configuration.

Values come from the process environment; api.main calls load_dotenv()
first so a local .env file can supply them.
"""

import os
from dataclasses import dataclass
from datetime import timedelta

DEFAULT_PUBLIC_KEY_PATH = "pubkey.rsa"
DEFAULT_PRIVATE_KEY_PATH = "privkey.rsa"
DEFAULT_JWT_EXPIRATION_MINUTES = 24 * 60
DEFAULT_BCRYPT_ROUNDS = 12
DEFAULT_PORT = 8000


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    public_key_path: str
    private_key_path: str
    jwt_expiration: timedelta
    bcrypt_rounds: int
    port: int


def load_settings() -> Settings:
    """Read settings from the environment. Raises ValueError on bad integers."""
    return Settings(
        public_key_path=os.getenv("JWT_PUBLIC_KEY_PATH", DEFAULT_PUBLIC_KEY_PATH),
        private_key_path=os.getenv("JWT_PRIVATE_KEY_PATH", DEFAULT_PRIVATE_KEY_PATH),
        jwt_expiration=timedelta(minutes=_int_env("JWT_EXPIRATION_MINUTES", DEFAULT_JWT_EXPIRATION_MINUTES)),
        bcrypt_rounds=_int_env("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS),
        port=_int_env("PORT", DEFAULT_PORT),
    )
