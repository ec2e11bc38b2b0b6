"""Report library — Markdown job reports and machine-readable tables.

Public API:
    - generate_markdown_report: Render a job report as Markdown
    - ReportData: Report inputs
    - confidence_bands: High/mid/low confidence counts
    - report_file_name: Report file name for a job
    - address_count_rows / region_count_rows: Ranked table rows
    - error_type_counts: Failed rows grouped by error message
    - address_counts_csv / region_counts_csv / error_types_csv: CSV renderings
"""

from geobatch.lib.report.markdown import (
    ConfidenceBands,
    ReportData,
    confidence_bands,
    generate_markdown_report,
    report_file_name,
)
from geobatch.lib.report.tables import (
    ADDRESS_COUNT_COLUMNS,
    ERROR_TYPE_COLUMNS,
    REGION_COUNT_COLUMNS,
    address_count_rows,
    address_counts_csv,
    error_type_counts,
    error_types_csv,
    region_count_rows,
    region_counts_csv,
)

__all__ = [
    "ADDRESS_COUNT_COLUMNS",
    "ERROR_TYPE_COLUMNS",
    "REGION_COUNT_COLUMNS",
    "ConfidenceBands",
    "ReportData",
    "address_count_rows",
    "address_counts_csv",
    "confidence_bands",
    "error_type_counts",
    "error_types_csv",
    "generate_markdown_report",
    "region_count_rows",
    "region_counts_csv",
    "report_file_name",
]
