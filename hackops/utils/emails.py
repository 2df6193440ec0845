"""Email address normalisation shared by every component."""

from email_validator import EmailNotValidError, validate_email

from hackops.errors import ValidationFailed


def normalize_email(raw: str) -> str:
    """Validate an address and return its lower-cased form."""
    try:
        info = validate_email((raw or "").strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationFailed("invalid_email", f"Invalid email address: {e}") from e
    return info.normalized.lower()
