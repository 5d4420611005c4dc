from dataclasses import dataclass


@dataclass
class User:
    """Domain model representing a registered user."""
    email: str
    password_hash: str
    favorite_cake: str
