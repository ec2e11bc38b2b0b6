"""Address library — normalization, deduplication, and validation of freeform addresses.

Public API:
    - normalize_address: Canonicalize one raw address with a confidence score
    - normalize_address_batch: Normalize a list independently
    - expand_abbreviations: Token-boundary province name expansion
    - NormalizedAddress: Normalization result dataclass
    - deduplicate: Group addresses by normalized form
    - count_duplicates: Occurrences per normalized form
    - DeduplicationResult: Unique addresses plus index map
    - validate_address: Advisory plausibility check
    - summarize_addresses: Input statistics before submission
"""

from geobatch.lib.address.dedupe import DeduplicationResult, count_duplicates, deduplicate
from geobatch.lib.address.normalize import (
    ADMIN_AREA_PATTERN,
    NormalizedAddress,
    expand_abbreviations,
    normalize_address,
    normalize_address_batch,
)
from geobatch.lib.address.validate import (
    AddressSummary,
    AddressValidation,
    estimate_processing_seconds,
    summarize_addresses,
    validate_address,
)

__all__ = [
    "ADMIN_AREA_PATTERN",
    "AddressSummary",
    "AddressValidation",
    "DeduplicationResult",
    "NormalizedAddress",
    "count_duplicates",
    "deduplicate",
    "estimate_processing_seconds",
    "expand_abbreviations",
    "normalize_address",
    "normalize_address_batch",
    "summarize_addresses",
    "validate_address",
]
