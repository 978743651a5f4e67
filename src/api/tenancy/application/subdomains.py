"""Subdomain helpers used during onboarding."""

from __future__ import annotations

import re
import secrets
import string

SUGGESTION_BASE_LENGTH = 20
SUGGESTION_SUFFIX_LENGTH = 4
FALLBACK_BASE = "blog"

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def suggest_subdomain(name: str) -> str:
    """Derive a candidate subdomain from a display name.

    Keeps lowercase letters and digits, truncates to 20 characters and
    appends a short random suffix, e.g. ``"Acme Blog!"`` -> ``"acmeblog-x7k2"``.
    The candidate is syntactically valid but not guaranteed to be free.
    """
    base = _NON_ALPHANUMERIC.sub("", name.lower())[:SUGGESTION_BASE_LENGTH]
    suffix = "".join(
        secrets.choice(_SUFFIX_ALPHABET) for _ in range(SUGGESTION_SUFFIX_LENGTH)
    )
    return f"{base or FALLBACK_BASE}-{suffix}"
