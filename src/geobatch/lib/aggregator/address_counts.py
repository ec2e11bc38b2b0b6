"""Duplicate-address aggregation over successfully geocoded rows."""

from collections import Counter
from dataclasses import dataclass, field

DEFAULT_TOP_N = 20


@dataclass
class AddressCount:
    """A normalized address with its occurrence count and share of the total."""

    address: str
    count: int
    percentage: float


@dataclass
class AddressAggregation:
    """Result of counting identical normalized addresses."""

    total: int
    unique: int
    duplicates: int
    top_addresses: list[AddressCount] = field(default_factory=list)


def aggregate_addresses(addresses: list[str], top_n: int = DEFAULT_TOP_N) -> AddressAggregation:
    """Count occurrences of each exact normalized address.

    Empty entries are ignored.  Percentages are relative to the number of
    non-empty addresses.  Ties keep first-seen order.

    Args:
        addresses: Normalized addresses of successfully geocoded rows.
        top_n: Maximum number of ranked entries to return.

    Returns:
        AddressAggregation with the top-N addresses by count, descending.
    """
    present = [a for a in addresses if a]
    counts = Counter(present)
    total = len(present)

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    top = [
        AddressCount(address=address, count=count, percentage=count / total * 100)
        for address, count in ranked[:top_n]
    ]

    return AddressAggregation(
        total=total,
        unique=len(counts),
        duplicates=total - len(counts),
        top_addresses=top,
    )
