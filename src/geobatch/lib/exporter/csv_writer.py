"""CSV writer for geocoding results and aggregate tables."""

import csv
import io
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TextIO

# Characters that trigger formula execution in spreadsheet applications
_FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")

RESULT_COLUMNS = [
    "original",
    "normalized",
    "lat",
    "lng",
    "confidence",
    "roadAddress",
    "jibunAddress",
]

ERROR_COLUMNS = ["original", "errorMessage"]


def _sanitize_cell(value: object) -> object:
    """Sanitize a cell value to prevent CSV formula injection.

    Prefixes values starting with formula-triggering characters with
    a single quote to prevent execution in spreadsheet applications.

    Args:
        value: The cell value to sanitize.

    Returns:
        The sanitized value.
    """
    if isinstance(value, str) and value and value[0] in _FORMULA_PREFIXES:
        return f"'{value}"
    return value


def _write_rows(f: TextIO, records: Iterable[dict[str, Any]], columns: list[str]) -> int:
    writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
    writer.writeheader()
    count = 0
    for record in records:
        writer.writerow({k: _sanitize_cell(v) for k, v in record.items()})
        count += 1
    return count


def write_csv(
    output_path: Path,
    records: Iterable[dict[str, Any]],
    *,
    columns: list[str],
) -> int:
    """Write records to a UTF-8 CSV file.

    Written with a byte-order mark so spreadsheet applications detect the
    encoding of Hangul text.

    Args:
        output_path: Path to write the CSV file.
        records: Iterable of row dicts.
        columns: Column names, in order.

    Returns:
        Number of records written.
    """
    with output_path.open("w", newline="", encoding="utf-8-sig") as f:
        return _write_rows(f, records, columns)


def render_csv(records: Iterable[dict[str, Any]], *, columns: list[str]) -> str:
    """Render records as CSV text."""
    buffer = io.StringIO()
    _write_rows(buffer, records, columns)
    return buffer.getvalue()
