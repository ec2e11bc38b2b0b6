"""Aggregator library — counts over successfully geocoded addresses.

Public API:
    - aggregate_addresses: Identical-address counts with top-N ranking
    - aggregate_regions: Province + city/county/district counts with top-N ranking
    - extract_region: Leading province/city extraction
    - successful_addresses: Select aggregation input from processed rows
    - AddressCount / AddressAggregation / Region / RegionCount / RegionAggregation
"""

from collections.abc import Iterable

from geobatch.lib.aggregator.address_counts import (
    DEFAULT_TOP_N,
    AddressAggregation,
    AddressCount,
    aggregate_addresses,
)
from geobatch.lib.aggregator.region_counts import (
    Region,
    RegionAggregation,
    RegionCount,
    aggregate_regions,
    extract_region,
)
from geobatch.models.job import ProcessedAddress


def successful_addresses(results: Iterable[ProcessedAddress]) -> list[str]:
    """Normalized addresses of successful rows, skipping empty ones.

    Args:
        results: Processed rows of a job.

    Returns:
        Aggregation input in row order.
    """
    return [r.normalized_address for r in results if r.succeeded and r.normalized_address]


__all__ = [
    "DEFAULT_TOP_N",
    "AddressAggregation",
    "AddressCount",
    "Region",
    "RegionAggregation",
    "RegionCount",
    "aggregate_addresses",
    "aggregate_regions",
    "extract_region",
    "successful_addresses",
]
