"""Team join codes and logistics secret codes.

Both are meant to be read aloud and typed by hand, so they are upper-case
and normalised the same way on the way in.
"""

import re
import secrets

from hackops.errors import ValidationFailed

TEAM_CODE_LENGTH = 6
TEAM_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
_TEAM_CODE_RE = re.compile(r"^[A-Za-z0-9]{6}$")

# No 0/O, 1/I/L.
SECRET_CODE_ALPHABET = "23456789ABCDEFGHJKMNPQRSTUVWXYZ"
SECRET_CODE_GROUPS = 3
SECRET_CODE_GROUP_SIZE = 4


def generate_team_code() -> str:
    return "".join(secrets.choice(TEAM_CODE_ALPHABET) for _ in range(TEAM_CODE_LENGTH))


def normalize_team_code(raw: str) -> str:
    """Trim and upper-case a team code, rejecting anything but 6 alphanumerics."""
    code = (raw or "").strip()
    if not _TEAM_CODE_RE.match(code):
        raise ValidationFailed(
            "invalid_team_code", "Team code must be exactly 6 alphanumeric characters."
        )
    return code.upper()


def generate_secret_code() -> str:
    """Return a fresh ``XXXX-XXXX-XXXX`` capability code."""
    groups = [
        "".join(secrets.choice(SECRET_CODE_ALPHABET) for _ in range(SECRET_CODE_GROUP_SIZE))
        for _ in range(SECRET_CODE_GROUPS)
    ]
    return "-".join(groups)


def normalize_secret_code(raw: str) -> str:
    code = (raw or "").strip().upper()
    if not code:
        raise ValidationFailed("empty_secret_code", "Secret code is required.")
    return code
