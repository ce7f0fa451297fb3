"""Email normalization and syntax checks."""

from __future__ import annotations

import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def same_email(a: str | None, b: str | None) -> bool:
    left = normalize_email(a)
    return bool(left) and left == normalize_email(b)


def is_valid_email(email: str | None) -> bool:
    return bool(EMAIL_PATTERN.match((email or "").strip()))
