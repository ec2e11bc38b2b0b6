"""Batch service — orchestrates one geocoding job end to end.

A job moves ``pending → processing → completed | failed``.  Each input row
is normalized, geocoded through the shared client, and recorded in the job
store before the next row's outcome is counted; a failing row becomes a
``failed`` result and never aborts the batch.  Result files are written
after completion and their outcome is tracked separately from the job
status.
"""

import asyncio
import time
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from geobatch.core.background import BackgroundTaskRunner
from geobatch.core.logging import job_logger
from geobatch.lib.address import normalize_address, summarize_addresses
from geobatch.lib.geocoder import GeocodeClient, GeocodeResult, is_in_korea
from geobatch.models.job import ArtifactStatus, Job, JobStatus, ProcessedAddress, RowStatus
from geobatch.schemas.job import JobProgressResponse
from geobatch.services.job_store import JobNotFoundError, JobStateError, JobStore

DEFAULT_CHECKPOINT_INTERVAL = 100
CANCELLED_MESSAGE = "Job cancelled"

ProgressCallback = Callable[[int, int], None]


class ArtifactWriter(Protocol):
    """Persists the results of a completed job."""

    def write(self, job_id: str, results: list[ProcessedAddress], processing_seconds: float) -> list[Path]: ...


def generate_job_id() -> str:
    """Return a new job ID of the form ``job_<epoch ms>_<random>``."""
    return f"job_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def create_batch_job(store: JobStore, addresses: list[str], *, job_id: str | None = None) -> Job:
    """Validate input and register a ``pending`` job for it.

    Args:
        store: Job store to register the job in.
        addresses: Raw address rows, one per input record.
        job_id: Optional caller-chosen ID; generated when omitted.

    Returns:
        Snapshot of the created job.

    Raises:
        ValueError: If the input is not a list or the job ID is blank.
        JobStateError: If the job ID is already taken.
    """
    if not isinstance(addresses, list):
        msg = f"addresses must be a list, got {type(addresses).__name__}"
        raise ValueError(msg)

    job = store.create_job(job_id if job_id is not None else generate_job_id(), len(addresses))
    summary = summarize_addresses(addresses)
    logger.info(
        f"Created batch job {job.job_id}: {summary.total_rows} rows, {summary.unique_addresses} unique, "
        f"{summary.empty_rows} empty, ~{summary.estimated_seconds}s estimated"
    )
    return job


def _combine(raw: str, normalized_confidence: float, normalized: str, result: GeocodeResult) -> ProcessedAddress:
    if result.succeeded:
        return ProcessedAddress(
            original_address=raw,
            normalized_address=normalized,
            status=RowStatus.SUCCESS,
            confidence=min(normalized_confidence, result.confidence),
            latitude=result.latitude,
            longitude=result.longitude,
            road_address=result.road_address,
            jibun_address=result.jibun_address,
            in_service_area=is_in_korea(result.latitude, result.longitude),
        )
    return ProcessedAddress(
        original_address=raw,
        normalized_address=normalized,
        status=RowStatus.FAILED,
        confidence=min(normalized_confidence, result.confidence),
        error=result.error,
    )


async def _process_one(
    store: JobStore,
    client: GeocodeClient,
    job_id: str,
    raw: Any,
    checkpoint_interval: int,
    on_progress: ProgressCallback | None,
) -> ProcessedAddress:
    original = raw if isinstance(raw, str) else ("" if raw is None else str(raw))
    try:
        norm = normalize_address(original)
        result = await client.geocode(norm.normalized)
        row = _combine(original, norm.confidence, norm.normalized, result)
    except Exception as e:
        logger.warning(f"Job {job_id}: failed to process {original!r}: {e}")
        row = ProcessedAddress(
            original_address=original,
            normalized_address=original.strip(),
            status=RowStatus.FAILED,
            error=str(e) or type(e).__name__,
        )

    snapshot = store.record_item(
        job_id,
        success=row.succeeded,
        current_address=original,
        checkpoint_interval=checkpoint_interval,
    )
    if snapshot is None:
        raise JobNotFoundError(job_id)
    if on_progress is not None:
        on_progress(snapshot.processed_count, snapshot.total_count)
    return row


async def _run_sequential(
    store: JobStore,
    client: GeocodeClient,
    job_id: str,
    addresses: list[Any],
    checkpoint_interval: int,
    on_progress: ProgressCallback | None,
) -> list[ProcessedAddress]:
    return [
        await _process_one(store, client, job_id, raw, checkpoint_interval, on_progress) for raw in addresses
    ]


async def _run_concurrent(
    store: JobStore,
    client: GeocodeClient,
    job_id: str,
    addresses: list[Any],
    checkpoint_interval: int,
    concurrency: int,
    on_progress: ProgressCallback | None,
) -> list[ProcessedAddress]:
    """Fan rows out over worker tasks; results keep input order."""
    results: list[ProcessedAddress | None] = [None] * len(addresses)
    # Shared iterator: each index is handed to exactly one worker.
    pending = iter(enumerate(addresses))

    async def worker() -> None:
        for index, raw in pending:
            results[index] = await _process_one(store, client, job_id, raw, checkpoint_interval, on_progress)

    workers = [asyncio.create_task(worker()) for _ in range(min(concurrency, len(addresses)))]
    try:
        await asyncio.gather(*workers)
    except BaseException:
        for task in workers:
            task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
        raise
    return [row for row in results if row is not None]


def _mark_failed(store: JobStore, job_id: str, message: str) -> None:
    try:
        store.update_job(job_id, status=JobStatus.FAILED, error=message, ended_at=datetime.now(UTC))
    except JobStateError:
        logger.warning(f"Job {job_id} already finished; not marking it failed")


def _persist(
    store: JobStore,
    job_id: str,
    writer: ArtifactWriter,
    results: list[ProcessedAddress],
    processing_seconds: float,
) -> None:
    try:
        paths = writer.write(job_id, results, processing_seconds)
    except Exception as e:
        logger.exception(f"Failed to write artifacts for job {job_id}")
        store.update_job(job_id, artifact_status=ArtifactStatus.FAILED, artifact_error=str(e))
        return
    store.update_job(job_id, artifact_status=ArtifactStatus.WRITTEN, artifact_paths=[str(p) for p in paths])


async def process_batch(
    store: JobStore,
    client: GeocodeClient,
    job_id: str,
    addresses: list[str],
    *,
    checkpoint_interval: int = DEFAULT_CHECKPOINT_INTERVAL,
    concurrency: int = 1,
    writer: ArtifactWriter | None = None,
    on_progress: ProgressCallback | None = None,
) -> list[ProcessedAddress]:
    """Process a ``pending`` job to completion.

    Rows are processed in input order when ``concurrency`` is 1.  With
    higher concurrency rows fan out through the same client and rate
    limiter; counters and checkpoints stay consistent but the current
    address marker becomes best-effort.

    Args:
        store: Job store holding the job.
        client: Geocode client shared by every row.
        job_id: ID of a ``pending`` job.
        addresses: Raw address rows.
        checkpoint_interval: Append a checkpoint every N processed rows.
        concurrency: Number of rows in flight at once.
        writer: Optional artifact writer run after completion.
        on_progress: Called with (processed, total) after each row.

    Returns:
        One ProcessedAddress per input row, in input order.

    Raises:
        JobNotFoundError: If the job does not exist.
        JobStateError: If the job is not ``pending``.
        ValueError: If the interval or concurrency is below 1.
    """
    log = job_logger(job_id)
    job = store.get_job(job_id, include_results=False)
    if job is None:
        raise JobNotFoundError(job_id)
    if job.status != JobStatus.PENDING:
        msg = f"Job {job_id} is {job.status}; only pending jobs can be processed"
        raise JobStateError(msg)

    try:
        if checkpoint_interval < 1:
            msg = f"checkpoint_interval must be at least 1, got {checkpoint_interval}"
            raise ValueError(msg)
        if concurrency < 1:
            msg = f"concurrency must be at least 1, got {concurrency}"
            raise ValueError(msg)

        fields: dict[str, Any] = {"status": JobStatus.PROCESSING, "started_at": datetime.now(UTC)}
        if job.total_count != len(addresses):
            log.warning(
                f"Created for {job.total_count} rows but received {len(addresses)}; "
                "using the received count"
            )
            fields["total_count"] = len(addresses)
        started = store.update_job(job_id, **fields)
        log.info(f"Processing {len(addresses)} rows, concurrency={concurrency}")

        if concurrency == 1:
            results = await _run_sequential(store, client, job_id, addresses, checkpoint_interval, on_progress)
        else:
            results = await _run_concurrent(
                store, client, job_id, addresses, checkpoint_interval, concurrency, on_progress
            )

        ended_at = datetime.now(UTC)
        finished = store.update_job(job_id, status=JobStatus.COMPLETED, ended_at=ended_at, results=results)
    except asyncio.CancelledError:
        log.warning("Job cancelled")
        _mark_failed(store, job_id, CANCELLED_MESSAGE)
        raise
    except Exception as e:
        log.exception("Job failed")
        _mark_failed(store, job_id, str(e) or type(e).__name__)
        raise

    processing_seconds = (ended_at - started.started_at).total_seconds() if started and started.started_at else 0.0
    if finished is not None:
        log.info(
            f"Completed: {finished.processed_count} processed, {finished.success_count} succeeded, "
            f"{finished.failed_count} failed in {processing_seconds:.1f}s"
        )

    if writer is not None:
        _persist(store, job_id, writer, results, processing_seconds)
    return results


def submit_batch_job(
    runner: BackgroundTaskRunner,
    store: JobStore,
    client: GeocodeClient,
    addresses: list[str],
    *,
    job_id: str | None = None,
    checkpoint_interval: int = DEFAULT_CHECKPOINT_INTERVAL,
    concurrency: int = 1,
    writer: ArtifactWriter | None = None,
) -> Job:
    """Create a job and start processing it in the background.

    Returns immediately with the ``pending`` job; poll progress with
    :func:`get_job_progress`.

    Raises:
        ValueError: If the input is invalid (nothing is created or started).
        JobStateError: If the job ID is already taken.
    """
    job = create_batch_job(store, addresses, job_id=job_id)

    def _on_error(error: BaseException) -> None:
        # process_batch marks the job itself; this covers a task cancelled before it started.
        current = store.get_job(job.job_id, include_results=False)
        if current is not None and not current.is_terminal:
            _mark_failed(store, job.job_id, str(error) or CANCELLED_MESSAGE)

    runner.submit_task(
        process_batch(
            store,
            client,
            job.job_id,
            addresses,
            checkpoint_interval=checkpoint_interval,
            concurrency=concurrency,
            writer=writer,
        ),
        task_id=job.job_id,
        on_error=_on_error,
    )
    return job


def get_job_progress(store: JobStore, job_id: str, now: datetime | None = None) -> JobProgressResponse | None:
    """Progress view of a job, or None if it is unknown."""
    job = store.get_job(job_id, include_results=False)
    if job is None:
        return None
    return JobProgressResponse.from_job(job, now=now)
