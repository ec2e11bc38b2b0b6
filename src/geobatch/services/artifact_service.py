"""Artifact service — writes result files for a finished batch job."""

from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

from geobatch.lib.aggregator import DEFAULT_TOP_N, aggregate_addresses, aggregate_regions, successful_addresses
from geobatch.lib.exporter import ERROR_COLUMNS, RESULT_COLUMNS, write_csv
from geobatch.lib.report import (
    ADDRESS_COUNT_COLUMNS,
    REGION_COUNT_COLUMNS,
    ReportData,
    address_count_rows,
    generate_markdown_report,
    region_count_rows,
    report_file_name,
)
from geobatch.models.job import ProcessedAddress


def _result_row(row: ProcessedAddress) -> dict:
    return {
        "original": row.original_address,
        "normalized": row.normalized_address,
        "lat": row.latitude,
        "lng": row.longitude,
        "confidence": row.confidence,
        "roadAddress": row.road_address or "",
        "jibunAddress": row.jibun_address or "",
    }


def _error_row(row: ProcessedAddress) -> dict:
    return {"original": row.original_address, "errorMessage": row.error or ""}


class FileArtifactWriter:
    """Writes job artifacts into one output directory.

    Files per job:
        - ``results_<id>.csv``: successful rows with coordinates
        - ``errors_<id>.csv``: failed rows with their error message
        - ``report_<id>.md``: Markdown report
        - ``address_counts_<id>.csv``: identical-address ranking
        - ``region_counts_<id>.csv``: region ranking
    """

    def __init__(self, output_dir: Path | str, top_n: int = DEFAULT_TOP_N, source_name: str = "batch") -> None:
        self._output_dir = Path(output_dir)
        self._top_n = top_n
        self._source_name = source_name

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def write(self, job_id: str, results: list[ProcessedAddress], processing_seconds: float) -> list[Path]:
        """Write every artifact for a job.

        Args:
            job_id: Job identifier used in file names.
            results: Processed rows in input order.
            processing_seconds: Wall-clock processing time for the report.

        Returns:
            Paths of the written files.

        Raises:
            OSError: If the directory or a file cannot be written.
        """
        self._output_dir.mkdir(parents=True, exist_ok=True)

        succeeded = [r for r in results if r.succeeded]
        failed = [r for r in results if not r.succeeded]
        addresses = successful_addresses(results)

        results_path = self._output_dir / f"results_{job_id}.csv"
        write_csv(results_path, (_result_row(r) for r in succeeded), columns=RESULT_COLUMNS)

        errors_path = self._output_dir / f"errors_{job_id}.csv"
        write_csv(errors_path, (_error_row(r) for r in failed), columns=ERROR_COLUMNS)

        report = generate_markdown_report(
            ReportData(
                job_id=job_id,
                source_name=self._source_name,
                processed_at=datetime.now(UTC),
                results=results,
                total_count=len(results),
                success_count=len(succeeded),
                failed_count=len(failed),
                processing_seconds=processing_seconds,
            ),
            top_n=self._top_n,
        )
        report_path = self._output_dir / report_file_name(job_id)
        report_path.write_text(report, encoding="utf-8")

        address_counts_path = self._output_dir / f"address_counts_{job_id}.csv"
        write_csv(
            address_counts_path,
            address_count_rows(aggregate_addresses(addresses, self._top_n).top_addresses),
            columns=ADDRESS_COUNT_COLUMNS,
        )

        region_counts_path = self._output_dir / f"region_counts_{job_id}.csv"
        write_csv(
            region_counts_path,
            region_count_rows(aggregate_regions(addresses, self._top_n).top_regions),
            columns=REGION_COUNT_COLUMNS,
        )

        paths = [results_path, errors_path, report_path, address_counts_path, region_counts_path]
        logger.info(f"Wrote {len(paths)} artifacts for job {job_id} to {self._output_dir}")
        return paths
