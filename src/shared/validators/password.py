"""Password validation functions."""

MIN_PASSWORD_LENGTH = 8


def validate_password_strength(password: str) -> str:
    """Validate password strength requirements.

    Requirements:
    - At least 8 characters
    - At least one letter
    - At least one digit
    - No leading or trailing whitespace

    Args:
        password: Password string to validate

    Returns:
        The validated password string

    Raises:
        ValueError: If password doesn't meet strength requirements

    Examples:
        >>> validate_password_strength("secret123")
        'secret123'
        >>> validate_password_strength("password")
        Traceback (most recent call last):
        ...
        ValueError: Password must contain at least one digit

    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if password != password.strip():
        raise ValueError("Password must not start or end with whitespace")
    if not any(c.isalpha() for c in password):
        raise ValueError("Password must contain at least one letter")
    if not any(c.isdigit() for c in password):
        raise ValueError("Password must contain at least one digit")
    return password
