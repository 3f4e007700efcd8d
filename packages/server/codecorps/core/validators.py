"""Format validators for user profile fields. Each takes a string and returns a bool."""

from __future__ import annotations

import re

from email_validator import EmailNotValidError, validate_email

TWITTER_HANDLE_RE = re.compile(r"^[a-zA-Z0-9_]{1,15}$")

URL_RE = re.compile(
    r"^(https?://)?"
    r"[-a-zA-Z0-9@:%._+~#=]{2,256}\.[a-zA-Z]{2,63}\b"
    r"([-a-zA-Z0-9@:%_+.~#?&/=]*)$"
)

URL_SCHEMES = ("http://", "https://")


def is_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_url(value: str) -> bool:
    return URL_RE.match(value) is not None


def is_twitter_handle(value: str) -> bool:
    return TWITTER_HANDLE_RE.match(value) is not None


def ensure_url_scheme(value: str) -> str:
    """Prefix ``http://`` unless the URL already names http or https."""
    if value.lower().startswith(URL_SCHEMES):
        return value
    return f"http://{value}"
