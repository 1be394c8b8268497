"""
Trade-In Client — Field Normalizers & Validators

UK bank details are typed with all sorts of separators ("12-34-56",
"12 34 56"). They are normalized once here, and the normalized form is both
validated and transmitted.
"""

from __future__ import annotations

import re

_SORT_CODE_SEPARATORS = re.compile(r"[-\s]")
_WHITESPACE = re.compile(r"\s")
_SORT_CODE = re.compile(r"^[0-9]{6}$")
_ACCOUNT_NUMBER = re.compile(r"^[0-9]{8}$")


def normalize_sort_code(value: str | None) -> str:
    """'12-34-56' -> '123456'."""
    return _SORT_CODE_SEPARATORS.sub("", value or "")


def normalize_account_number(value: str | None) -> str:
    """'1234 5678' -> '12345678'."""
    return _WHITESPACE.sub("", value or "")


def is_valid_sort_code(value: str) -> bool:
    return bool(_SORT_CODE.match(value))


def is_valid_account_number(value: str) -> bool:
    return bool(_ACCOUNT_NUMBER.match(value))


def normalize_submission_number(value: str | None) -> str:
    """Tracking lookups are case-insensitive: ' ti-2024-abc123 ' -> 'TI-2024-ABC123'."""
    return (value or "").strip().upper()
