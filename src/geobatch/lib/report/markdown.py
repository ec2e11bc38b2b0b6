"""Markdown report generation for completed batch jobs.

Pure rendering: takes processed rows plus summary counters and returns the
report text.  Writing it anywhere is the caller's job.
"""

from dataclasses import dataclass
from datetime import datetime

from geobatch.lib.aggregator import (
    DEFAULT_TOP_N,
    AddressCount,
    RegionCount,
    aggregate_addresses,
    aggregate_regions,
    successful_addresses,
)
from geobatch.lib.report.tables import UNKNOWN_ERROR, error_type_counts
from geobatch.models.job import ProcessedAddress

HIGH_CONFIDENCE = 85
MID_CONFIDENCE = 70
FAILED_SAMPLE_SIZE = 5


@dataclass
class ReportData:
    """Inputs for one job report."""

    job_id: str
    source_name: str
    processed_at: datetime
    results: list[ProcessedAddress]
    total_count: int
    success_count: int
    failed_count: int
    processing_seconds: float


@dataclass
class ConfidenceBands:
    """Row counts per confidence band."""

    high: int
    mid: int
    low: int


def confidence_bands(results: list[ProcessedAddress]) -> ConfidenceBands:
    """Split rows into high (>=85), mid (70-84), and low (<70) confidence."""
    high = sum(1 for r in results if r.confidence >= HIGH_CONFIDENCE)
    mid = sum(1 for r in results if MID_CONFIDENCE <= r.confidence < HIGH_CONFIDENCE)
    return ConfidenceBands(high=high, mid=mid, low=len(results) - high - mid)


def report_file_name(job_id: str) -> str:
    return f"report_{job_id}.md"


def _pct(part: int, whole: int) -> str:
    return f"{(part / whole * 100) if whole else 0.0:.1f}%"


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _address_table(counts: list[AddressCount]) -> str:
    if not counts:
        return "No data."
    lines = ["| Rank | Address | Count | Share |", "|------|---------|-------|-------|"]
    for rank, item in enumerate(counts, start=1):
        lines.append(f"| {rank} | {_cell(item.address)} | {item.count:,} | {item.percentage:.1f}% |")
    return "\n".join(lines)


def _region_table(counts: list[RegionCount]) -> str:
    if not counts:
        return "No data."
    lines = ["| Rank | Region | Count | Share |", "|------|--------|-------|-------|"]
    for rank, item in enumerate(counts, start=1):
        lines.append(f"| {rank} | {_cell(item.full_name)} | {item.count:,} | {item.percentage:.1f}% |")
    return "\n".join(lines)


def generate_markdown_report(
    data: ReportData,
    *,
    top_n: int = DEFAULT_TOP_N,
    include_errors: bool = True,
) -> str:
    """Render a job report as Markdown.

    Sections: summary, identical-address ranking, region ranking,
    confidence distribution, and (optionally) an error summary with the
    ten most frequent error messages and up to five failed rows.

    Args:
        data: Job results and counters.
        top_n: Rows kept in the ranking tables.
        include_errors: Whether to render the error summary.

    Returns:
        Markdown document.
    """
    results = data.results
    addresses = successful_addresses(results)
    address_agg = aggregate_addresses(addresses, top_n)
    region_agg = aggregate_regions(addresses, top_n)
    bands = confidence_bands(results)
    avg_confidence = sum(r.confidence for r in results) / len(results) if results else 0.0
    outside_area = sum(1 for r in results if r.succeeded and r.in_service_area is False)
    failures = [r for r in results if not r.succeeded]
    total = data.total_count

    sections: list[str] = [
        "# Address Geocoding Report\n",
        f"**Generated:** {data.processed_at:%Y-%m-%d %H:%M:%S}\n",
        f"**Source:** {data.source_name}\n",
        f"**Job ID:** {data.job_id}\n",
        "---\n",
        "## Summary\n",
        f"- **Total rows:** {total:,}",
        f"- **Succeeded:** {data.success_count:,} ({_pct(data.success_count, total)})",
        f"- **Failed:** {data.failed_count:,} ({_pct(data.failed_count, total)})",
        f"- **Processing time:** {data.processing_seconds:.1f}s",
        f"- **Average confidence:** {avg_confidence:.1f}",
    ]
    if outside_area:
        sections.append(f"- **Outside service area:** {outside_area:,}")
    sections.append("")

    sections += [
        f"## Identical Addresses (Top {top_n})\n",
        f"- **Geocoded addresses:** {address_agg.total:,}",
        f"- **Distinct addresses:** {address_agg.unique:,}",
        f"- **Repeated addresses:** {address_agg.duplicates:,}\n",
        _address_table(address_agg.top_addresses),
        "",
        f"## Regions (Top {top_n})\n",
        f"- **Regions listed:** {len(region_agg.top_regions)}",
        f"- **Addresses with a recognized province:** {region_agg.total:,}\n",
        _region_table(region_agg.top_regions),
        "",
        "## Confidence Distribution\n",
        f"- **High (>= {HIGH_CONFIDENCE}):** {bands.high:,} ({_pct(bands.high, total)})",
        f"- **Medium ({MID_CONFIDENCE}-{HIGH_CONFIDENCE - 1}):** {bands.mid:,} ({_pct(bands.mid, total)})",
        f"- **Low (< {MID_CONFIDENCE}):** {bands.low:,} ({_pct(bands.low, total)})\n",
    ]

    if include_errors and failures:
        sections += [
            "## Errors\n",
            f"{len(failures):,} rows failed.\n",
            "### Error Types\n",
            "| Error | Count |",
            "|-------|-------|",
        ]
        sections += [f"| {_cell(error)} | {count:,} |" for error, count in error_type_counts(failures)]
        sections += ["", "### Failed Row Samples\n"]
        for index, row in enumerate(failures[:FAILED_SAMPLE_SIZE], start=1):
            sections.append(f"{index}. **{row.original_address}**")
            sections.append(f"   - Error: {row.error or UNKNOWN_ERROR}\n")

    sections += ["---\n", "*Generated automatically by geobatch.*"]
    return "\n".join(sections)
