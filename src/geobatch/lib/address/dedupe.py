"""Deduplication of raw addresses by normalized form."""

from collections import Counter
from dataclasses import dataclass, field

from geobatch.lib.address.normalize import normalize_address


@dataclass
class DeduplicationResult:
    """Distinct addresses and where each one occurs in the input.

    ``unique`` holds the first original spelling of each distinct normalized
    form, in first-seen order.  ``index_map`` maps each normalized form to the
    input indices that share it.
    """

    unique: list[str] = field(default_factory=list)
    index_map: dict[str, list[int]] = field(default_factory=dict)

    @property
    def duplicate_count(self) -> int:
        """Number of input rows that repeat an earlier normalized form."""
        return sum(len(indices) - 1 for indices in self.index_map.values())


def deduplicate(addresses: list[str]) -> DeduplicationResult:
    """Group addresses by normalized form.

    Args:
        addresses: Raw address strings.

    Returns:
        DeduplicationResult where ``len(unique) == len(index_map)`` and every
        input index appears in exactly one index list.
    """
    result = DeduplicationResult()
    for index, address in enumerate(addresses):
        key = normalize_address(address).normalized
        indices = result.index_map.get(key)
        if indices is None:
            result.index_map[key] = [index]
            result.unique.append(address)
        else:
            indices.append(index)
    return result


def count_duplicates(addresses: list[str]) -> dict[str, int]:
    """Count occurrences of each normalized form."""
    return dict(Counter(normalize_address(address).normalized for address in addresses))
