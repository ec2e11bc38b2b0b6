"""Machine-readable report tables."""

from collections import Counter
from collections.abc import Iterable

from geobatch.lib.aggregator import AddressCount, RegionCount
from geobatch.lib.exporter import render_csv
from geobatch.models.job import ProcessedAddress

ADDRESS_COUNT_COLUMNS = ["rank", "address", "count", "percentage"]
REGION_COUNT_COLUMNS = ["rank", "province", "city", "full_name", "count", "percentage"]
ERROR_TYPE_COLUMNS = ["error", "count"]

UNKNOWN_ERROR = "Unknown error"
DEFAULT_ERROR_LIMIT = 10


def address_count_rows(counts: Iterable[AddressCount]) -> list[dict]:
    return [
        {
            "rank": rank,
            "address": item.address,
            "count": item.count,
            "percentage": round(item.percentage, 1),
        }
        for rank, item in enumerate(counts, start=1)
    ]


def region_count_rows(counts: Iterable[RegionCount]) -> list[dict]:
    return [
        {
            "rank": rank,
            "province": item.province,
            "city": item.city,
            "full_name": item.full_name,
            "count": item.count,
            "percentage": round(item.percentage, 1),
        }
        for rank, item in enumerate(counts, start=1)
    ]


def error_type_counts(
    results: Iterable[ProcessedAddress],
    limit: int = DEFAULT_ERROR_LIMIT,
) -> list[tuple[str, int]]:
    """Group failed rows by exact error message.

    Args:
        results: Processed rows.
        limit: Maximum number of error types to return.

    Returns:
        (error message, count) pairs, most frequent first.
    """
    counts = Counter(r.error or UNKNOWN_ERROR for r in results if not r.succeeded)
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]


def address_counts_csv(counts: Iterable[AddressCount]) -> str:
    return render_csv(address_count_rows(counts), columns=ADDRESS_COUNT_COLUMNS)


def region_counts_csv(counts: Iterable[RegionCount]) -> str:
    return render_csv(region_count_rows(counts), columns=REGION_COUNT_COLUMNS)


def error_types_csv(results: Iterable[ProcessedAddress], limit: int = DEFAULT_ERROR_LIMIT) -> str:
    rows = [{"error": error, "count": count} for error, count in error_type_counts(results, limit)]
    return render_csv(rows, columns=ERROR_TYPE_COLUMNS)
