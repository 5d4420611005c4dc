"""Request models for the user API.

Every field defaults to the empty string so that a missing field is judged
by the validation and credential rules instead of the schema.
"""

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Request model for user registration."""
    email: str = ""
    password: str = ""
    favorite_cake: str = ""


class LoginRequest(BaseModel):
    """Request model for login and credential-checked reads."""
    email: str = ""
    password: str = ""


class ChangeCakeRequest(LoginRequest):
    new_cake: str = Field("", description="Replacement favorite cake")


class ChangeEmailRequest(LoginRequest):
    new_email: str = Field("", description="Replacement email")


class ChangePasswordRequest(LoginRequest):
    new_pass: str = Field("", description="Replacement password")
