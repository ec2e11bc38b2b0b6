"""Freeform Korean address normalization.

Canonicalizes raw address strings into a comparable form: whitespace and
typo cleanup, expansion of short province names to their legal names, and a
heuristic confidence score.  Normalization is pure and never raises.
"""

import re
from dataclasses import dataclass, field

# Short province/metropolitan names → legal names
ABBREVIATION_MAP: dict[str, str] = {
    "서울": "서울특별시",
    "서울시": "서울특별시",
    "부산": "부산광역시",
    "부산시": "부산광역시",
    "대구": "대구광역시",
    "대구시": "대구광역시",
    "인천": "인천광역시",
    "인천시": "인천광역시",
    "광주": "광주광역시",
    "광주시": "광주광역시",
    "대전": "대전광역시",
    "대전시": "대전광역시",
    "울산": "울산광역시",
    "울산시": "울산광역시",
    "세종": "세종특별자치시",
    "세종시": "세종특별자치시",
    "경기": "경기도",
    "강원": "강원도",
    "충북": "충청북도",
    "충남": "충청남도",
    "전북": "전라북도",
    "전남": "전라남도",
    "경북": "경상북도",
    "경남": "경상남도",
    "제주": "제주특별자치도",
    "제주도": "제주특별자치도",
}

# Whole-token matches only: "서울" must not fire inside "서울특별시" or "서울숲로"
_ABBREVIATION_PATTERNS: list[tuple[str, re.Pattern[str], str]] = [
    (abbr, re.compile(rf"(?<!\S){re.escape(abbr)}(?!\S)"), full) for abbr, full in ABBREVIATION_MAP.items()
]

_FULL_WIDTH_SPACE = re.compile("　")
_WHITESPACE_RUN = re.compile(r"\s+")
_SPLIT_NUMBER = re.compile(r"(?<=\d) (?=\d)")

ADMIN_AREA_PATTERN = re.compile(r"(특별시|광역시|특별자치시|특별자치도|도|시|군|구)")

MIN_ADDRESS_LENGTH = 5
ABBREVIATION_BONUS = 5
SHORT_ADDRESS_PENALTY = 20
MISSING_ADMIN_AREA_PENALTY = 15


@dataclass
class NormalizedAddress:
    """Result of normalizing one raw address."""

    original: str
    normalized: str
    confidence: int
    corrections: list[str] = field(default_factory=list)


def _clean(address: str) -> str:
    result = _FULL_WIDTH_SPACE.sub(" ", address.strip())
    result = _WHITESPACE_RUN.sub(" ", result).strip()
    return _SPLIT_NUMBER.sub("-", result)


def expand_abbreviations(address: str) -> tuple[str, list[str]]:
    """Expand short province names at token boundaries.

    Args:
        address: Whitespace-normalized address.

    Returns:
        Tuple of (expanded address, list of applied "abbr → full" notes).
    """
    expanded = address
    applied: list[str] = []
    for abbr, pattern, full in _ABBREVIATION_PATTERNS:
        expanded, count = pattern.subn(full, expanded)
        if count:
            applied.append(f"{abbr} → {full}")
    return expanded, applied


def normalize_address(address: str | None) -> NormalizedAddress:
    """Normalize a raw address string.

    Steps: trim, full-width → half-width spaces, collapse whitespace,
    hyphenate digit-space-digit runs, expand province abbreviations, then
    score confidence (100, +5 for an expansion, -20 when shorter than five
    characters, -15 without an administrative-area suffix, clamped to 0-100).

    Args:
        address: Raw address; ``None`` and blank strings are accepted.

    Returns:
        NormalizedAddress. Blank input yields an empty normalized string
        with confidence 0.
    """
    if not isinstance(address, str) or not address.strip():
        return NormalizedAddress(
            original=address if isinstance(address, str) else "",
            normalized="",
            confidence=0,
            corrections=["Address is empty or invalid"],
        )

    corrections: list[str] = []
    confidence = 100

    normalized = _clean(address)
    if normalized != address:
        corrections.append("Cleaned whitespace and typos")

    normalized, applied = expand_abbreviations(normalized)
    if applied:
        corrections.extend(applied)
        confidence += ABBREVIATION_BONUS

    if len(normalized) < MIN_ADDRESS_LENGTH:
        confidence -= SHORT_ADDRESS_PENALTY
        corrections.append("Address is too short")

    if not ADMIN_AREA_PATTERN.search(normalized):
        confidence -= MISSING_ADMIN_AREA_PENALTY
        corrections.append("No administrative area found")

    return NormalizedAddress(
        original=address,
        normalized=normalized,
        confidence=max(0, min(100, confidence)),
        corrections=corrections,
    )


def normalize_address_batch(addresses: list[str]) -> list[NormalizedAddress]:
    """Normalize each address independently."""
    return [normalize_address(addr) for addr in addresses]
