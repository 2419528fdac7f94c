from meetmogger.errors import ValidationError
from meetmogger.utils import is_email

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_name(name: str) -> str:
    return name.strip()


def validate_email(email: str) -> None:
    """Validate an already normalized email address."""
    if not is_email(email):
        raise ValidationError("Invalid email address")


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - Minimum length of 6 characters
    - At most 72 bytes once encoded, the bcrypt input limit

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
