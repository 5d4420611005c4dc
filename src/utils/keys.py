"""RSA key pair generation for token signing."""

from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

KEY_SIZE = 2048


def generate_key_pair(key_size: int = KEY_SIZE) -> tuple[str, str]:
    """Return a fresh (public_pem, private_pem) pair."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return public_pem.decode("utf-8"), private_pem.decode("utf-8")


def write_key_pair(public_key_path: str | Path, private_key_path: str | Path) -> None:
    """Generate a key pair and write both halves as PEM files."""
    public_pem, private_pem = generate_key_pair()
    private_path = Path(private_key_path)
    private_path.write_text(private_pem, encoding="utf-8")
    private_path.chmod(0o600)
    Path(public_key_path).write_text(public_pem, encoding="utf-8")
