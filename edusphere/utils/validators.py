"""Input validators for account forms."""
import re


EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

PASSWORD_SYMBOLS = "!@#$%^&*()_+[]{};':\"\\|,.<>/?"
STRONG_PASSWORD_PATTERN = re.compile(
    r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[' + re.escape(PASSWORD_SYMBOLS) + r']).{8,}$',
    re.DOTALL,
)


def is_valid_email(candidate) -> bool:
    """Check an address has the ``local@domain.tld`` shape.

    Surrounding whitespace is ignored; anything that is not a string is
    rejected.

    Examples:
        >>> is_valid_email("a@b.com")
        True
        >>> is_valid_email("a@b")
        False
    """
    if not isinstance(candidate, str):
        return False

    candidate = candidate.strip()
    if not candidate:
        return False

    return EMAIL_PATTERN.match(candidate) is not None


def is_strong_password(candidate) -> bool:
    """Check a password against the account policy.

    At least 8 characters with one lowercase letter, one uppercase letter,
    one digit and one symbol from ``PASSWORD_SYMBOLS``.
    """
    if not isinstance(candidate, str):
        return False

    candidate = candidate.strip()
    if not candidate:
        return False

    return STRONG_PASSWORD_PATTERN.match(candidate) is not None
