"""Field validation rules for registration and profile changes.

Every rule is a pure predicate returning ``(is_valid, error_message)``.
The messages are part of the public API and must not change.
"""

from email_validator import EmailNotValidError, validate_email as _parse_email

MIN_PASSWORD_LENGTH = 8

EMAIL_NOT_VALID = "email is not valid"
PASSWORD_TOO_SHORT = "password too short (at least 8 symbols)"
CAKE_EMPTY = "favorite cake is empty"
CAKE_NOT_ALPHABETIC = "favorite cake is only alphabetic"


def validate_email(email: str) -> tuple[bool, str]:
    try:
        _parse_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False, EMAIL_NOT_VALID
    return True, ""


def validate_password(password: str) -> tuple[bool, str]:
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, PASSWORD_TOO_SHORT
    return True, ""


def validate_cake_not_empty(cake: str) -> tuple[bool, str]:
    if len(cake) == 0:
        return False, CAKE_EMPTY
    return True, ""


def validate_cake_alphabetic(cake: str) -> tuple[bool, str]:
    if not cake.isalpha():
        return False, CAKE_NOT_ALPHABETIC
    return True, ""


def validate_cake(cake: str) -> tuple[bool, str]:
    """Run both cake rules, empty check first."""
    for rule in (validate_cake_not_empty, validate_cake_alphabetic):
        is_valid, error_msg = rule(cake)
        if not is_valid:
            return is_valid, error_msg
    return True, ""


def validate_registration(email: str, password: str, favorite_cake: str) -> tuple[bool, str]:
    """Validate registration fields, stopping at the first failing rule.

    Order: email format, password length, cake non-empty, cake alphabetic.
    """
    checks = (
        (validate_email, email),
        (validate_password, password),
        (validate_cake, favorite_cake),
    )
    for rule, value in checks:
        is_valid, error_msg = rule(value)
        if not is_valid:
            return is_valid, error_msg
    return True, ""
