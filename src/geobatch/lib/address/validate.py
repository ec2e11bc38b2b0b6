"""Pre-flight address validation and input statistics.

Scores raw addresses for plausibility before a batch is submitted and
summarizes an input set (empty rows, distinct addresses, estimated runtime).
Validation is advisory: it never blocks a row from being geocoded.
"""

import math
import re
from dataclasses import dataclass, field

from geobatch.lib.address.dedupe import deduplicate

MIN_TOKENS = 2
CONFIDENCE_LOW = 70
CONFIDENCE_HIGH = 85

# Rough provider throughput used for runtime estimates
SECONDS_PER_THOUSAND = 30

_ADMIN_AREA_MARKERS = ("시", "도", "구", "군", "동", "읍", "면", "로", "길")
_LATIN = re.compile(r"[a-zA-Z]")
_HANGUL = re.compile(r"[가-힣]")
_DIGITS_ONLY = re.compile(r"^\d+$")
_SYMBOLS_ONLY = re.compile(r"^[^가-힣a-zA-Z0-9]+$")


@dataclass
class AddressValidation:
    """Plausibility assessment of one raw address."""

    is_valid: bool
    confidence: int
    issues: list[str] = field(default_factory=list)
    is_foreign_address: bool = False
    has_latin: bool = False
    token_count: int = 0
    has_administrative_area: bool = False


@dataclass
class AddressSummary:
    """Statistics over an input address list."""

    total_rows: int
    empty_rows: int
    unique_addresses: int
    duplicate_rows: int
    estimated_seconds: int


def validate_address(address: str | None) -> AddressValidation:
    """Validate the shape of a raw address.

    Args:
        address: Raw address string.

    Returns:
        AddressValidation; ``is_valid`` when confidence is at least 70.
    """
    if not isinstance(address, str) or not address.strip():
        return AddressValidation(
            is_valid=False,
            confidence=0,
            issues=["Address is empty or invalid"],
        )

    trimmed = address.strip()
    issues: list[str] = []
    confidence = 100

    token_count = len(trimmed.split())
    if token_count < MIN_TOKENS:
        issues.append("Address is too short")
        confidence -= 30

    latin_chars = _LATIN.findall(trimmed)
    has_latin = bool(latin_chars)
    if has_latin and len(latin_chars) / len(trimmed) > 0.3:
        issues.append("Looks like a foreign address")
        confidence -= 50

    has_hangul = bool(_HANGUL.search(trimmed))
    if not has_hangul and not has_latin:
        issues.append("No usable characters found")
        confidence -= 40

    has_admin_area = any(marker in trimmed for marker in _ADMIN_AREA_MARKERS)
    if not has_admin_area:
        issues.append("No administrative area found")
        confidence -= 20

    if _DIGITS_ONLY.match(trimmed):
        issues.append("Address contains only digits")
        confidence -= 50

    if _SYMBOLS_ONLY.match(trimmed):
        issues.append("Address contains only symbols")
        confidence -= 50

    confidence = max(0, min(100, confidence))

    return AddressValidation(
        is_valid=confidence >= CONFIDENCE_LOW,
        confidence=confidence,
        issues=issues,
        is_foreign_address=has_latin and not has_hangul,
        has_latin=has_latin,
        token_count=token_count,
        has_administrative_area=has_admin_area,
    )


def estimate_processing_seconds(row_count: int) -> int:
    """Estimate wall-clock seconds to geocode ``row_count`` rows."""
    return math.ceil(row_count / 1000 * SECONDS_PER_THOUSAND)


def summarize_addresses(addresses: list[str | None]) -> AddressSummary:
    """Summarize an input address list before submission.

    Args:
        addresses: Raw addresses, possibly containing blanks.

    Returns:
        AddressSummary with empty, distinct, and duplicate counts.
    """
    present = [a for a in addresses if isinstance(a, str) and a.strip()]
    dedup = deduplicate(present)
    return AddressSummary(
        total_rows=len(addresses),
        empty_rows=len(addresses) - len(present),
        unique_addresses=len(dedup.unique),
        duplicate_rows=dedup.duplicate_count,
        estimated_seconds=estimate_processing_seconds(len(addresses)),
    )
