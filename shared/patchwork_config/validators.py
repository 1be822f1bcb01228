"""
Checks for individual configuration values.

Each check returns ``(ok, problem)``; ``problem`` is None when ok.
"""

import re


Check = tuple[bool, str | None]

OK: Check = (True, None)

GITHUB_TOKEN_PREFIXES = ("ghp_", "github_pat_", "ghs_", "gho_", "ghu_")

# Legacy personal tokens are 40 lowercase hex chars; newer ones start with CCIPAT_
_CIRCLE_HEX_TOKEN = re.compile(r"[0-9a-f]{40}")
_MIN_TOKEN_LENGTH = 20


def validate_non_empty(value: str | None, field_name: str) -> Check:
    if value is None:
        return False, f"{field_name} is not set"
    if not value.strip():
        return False, f"{field_name} is empty"
    return OK


def validate_github_token(token: str) -> Check:
    """Check the prefix and length of a GitHub personal, OAuth or App token."""
    if not token:
        return False, "GitHub token is empty"
    if not token.startswith(GITHUB_TOKEN_PREFIXES):
        return False, f"GitHub token must start with one of: {', '.join(GITHUB_TOKEN_PREFIXES)}"
    if len(token) < _MIN_TOKEN_LENGTH:
        return False, "GitHub token appears too short"
    return OK


def validate_circleci_token(token: str) -> Check:
    if not token:
        return False, "CircleCI token is empty"
    if token.startswith("CCIPAT_"):
        return OK if len(token) >= _MIN_TOKEN_LENGTH else (False, "CircleCI token appears too short")
    if _CIRCLE_HEX_TOKEN.fullmatch(token) is None:
        return False, "CircleCI token must be 40 hex characters or start with CCIPAT_"
    return OK


def validate_positive_number(value: object, field_name: str, *, allow_none: bool = False) -> Check:
    """Accept an int or float above zero; bools are not numbers here."""
    if value is None:
        return OK if allow_none else (False, f"{field_name} is not set")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False, f"{field_name} must be a number, got: {value!r}"
    if value <= 0:
        return False, f"{field_name} must be greater than zero, got: {value}"
    return OK


def mask_secret(value: str | None, *, visible_chars: int = 4) -> str:
    """Hide all but the first ``visible_chars`` characters: "ghp_************"."""
    if not value:
        return "[EMPTY]"
    shown = value[:visible_chars] if len(value) > visible_chars else ""
    return shown.ljust(len(value), "*")
