"""Phone number normalization, validation and formatting.

Two rules live here. ``validate_phone_number`` is the authoritative rule
applied by the lookup service: an international number written with a
leading ``+`` and 10-15 digits. ``is_valid_client_input`` is the more lenient
check applied by the page before submitting; it also accepts bare 10 or 11
digit domestic numbers, which ``format_for_submission`` then prefixes with a
country code so that they pass the authoritative rule.
"""

import re
from typing import Optional, Tuple

UNKNOWN_COUNTRY = "unknown"

# Ordered: first match wins, so "+1" must not shadow longer codes it prefixes.
KNOWN_COUNTRY_CODES: Tuple[Tuple[str, str], ...] = (
    ("+1", "US/Canada"),
    ("+44", "United Kingdom"),
    ("+33", "France"),
    ("+49", "Germany"),
    ("+81", "Japan"),
    ("+86", "China"),
    ("+91", "India"),
    ("+61", "Australia"),
    ("+55", "Brazil"),
    ("+7", "Russia"),
)

_NON_PHONE_CHARS = re.compile(r"[^0-9+]")
_INTERNATIONAL_PATTERN = re.compile(r"\+[0-9]{10,15}")
_DOMESTIC_PATTERN = re.compile(r"[0-9]{10,11}")

_DISPLAY_GROUPINGS = (
    (re.compile(r"^(\+1)(\d{3})(\d{3})(\d{4})$"), r"\1-\2-\3-\4"),
    (re.compile(r"(\+44)(\d{2})(\d{4})(\d{4})"), r"\1-\2-\3-\4"),
    (re.compile(r"(\+33)(\d)(\d{2})(\d{2})(\d{2})(\d{2})"), r"\1-\2-\3-\4-\5-\6"),
)
_GENERIC_GROUPING = (re.compile(r"(\+\d{1,3})(\d{3,4})(\d{3,4})(\d{2,4})"), r"\1-\2-\3-\4")


def normalize_phone_number(raw: str) -> str:
    """Strip everything except digits and a single leading ``+``."""
    cleaned = _NON_PHONE_CHARS.sub("", raw)
    if cleaned.startswith("+"):
        return "+" + cleaned[1:].replace("+", "")
    return cleaned.replace("+", "")


def validate_phone_number(raw: str) -> Optional[str]:
    """Apply the authoritative rule.

    Returns:
        The normalized number, or None when the input is rejected.
    """
    normalized = normalize_phone_number(raw)
    if _INTERNATIONAL_PATTERN.fullmatch(normalized):
        return normalized
    return None


def is_valid_phone_number(raw: str) -> bool:
    return validate_phone_number(raw) is not None


def is_valid_client_input(raw: str) -> bool:
    """Pre-check used by the page before a lookup is submitted."""
    normalized = normalize_phone_number(raw)
    return bool(
        _INTERNATIONAL_PATTERN.fullmatch(normalized)
        or _DOMESTIC_PATTERN.fullmatch(normalized)
    )


def country_code_for(raw: str) -> Optional[str]:
    normalized = normalize_phone_number(raw)
    for code, _ in KNOWN_COUNTRY_CODES:
        if normalized.startswith(code):
            return code
    return None


def detect_country(raw: str) -> str:
    """Return the display name of the country a number appears to belong to."""
    code = country_code_for(raw)
    for known_code, name in KNOWN_COUNTRY_CODES:
        if known_code == code:
            return name
    return UNKNOWN_COUNTRY


def format_for_submission(raw: str) -> str:
    """Reformat client input into the dashed international form sent to the API.

    Bare domestic numbers are assumed to be North American: ten digits get
    ``+1`` prepended, eleven digits that already start with the trunk ``1``
    only get the ``+``.
    """
    cleaned = normalize_phone_number(raw.strip())

    if not cleaned.startswith("+") and _DOMESTIC_PATTERN.fullmatch(cleaned):
        if len(cleaned) == 11 and cleaned.startswith("1"):
            cleaned = "+" + cleaned
        else:
            cleaned = "+1" + cleaned

    for pattern, replacement in _DISPLAY_GROUPINGS:
        if pattern.search(cleaned):
            return pattern.sub(replacement, cleaned, count=1)

    pattern, replacement = _GENERIC_GROUPING
    return pattern.sub(replacement, cleaned, count=1)
