"""In-memory job progress store.

Single source of truth for batch job progress within one process.  The
orchestrator is the only writer; progress readers receive snapshot copies.
Every operation on a job runs under that job's lock, so counter increments
are never lost and checkpoints are appended in processed-count order even
when several workers report results concurrently.

The store is an ordinary object: create one, pass it to the orchestrator
and to the progress query, and control its lifetime from the caller.
"""

import copy
import dataclasses
import threading
from datetime import UTC, datetime
from typing import Any

from loguru import logger

from geobatch.models.job import Checkpoint, Job, JobStatus

# Fields that may still change after a job reaches a terminal status
_POST_TERMINAL_FIELDS = frozenset({"artifact_status", "artifact_error", "artifact_paths"})
_IMMUTABLE_FIELDS = frozenset({"job_id", "checkpoints"})
_JOB_FIELDS = frozenset(f.name for f in dataclasses.fields(Job))


class JobNotFoundError(KeyError):
    """Raised when an operation requires a job that is not in the store."""


class JobStateError(ValueError):
    """Raised for an illegal job lifecycle operation."""


class JobStore:
    """Thread-safe registry of batch jobs keyed by job ID."""

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _entry(self, job_id: str) -> tuple[Job, threading.Lock] | None:
        with self._registry_lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            return job, self._locks[job_id]

    def create_job(self, job_id: str, total_count: int) -> Job:
        """Register a new ``pending`` job.

        Args:
            job_id: Unique job identifier.
            total_count: Number of input rows.

        Returns:
            Snapshot of the created job.

        Raises:
            ValueError: If the ID is blank or the count is negative.
            JobStateError: If a job with this ID already exists.
        """
        if not job_id or not job_id.strip():
            msg = "job_id must not be blank"
            raise ValueError(msg)
        if total_count < 0:
            msg = f"total_count must be non-negative, got {total_count}"
            raise ValueError(msg)

        with self._registry_lock:
            if job_id in self._jobs:
                msg = f"Job {job_id} already exists"
                raise JobStateError(msg)
            job = Job(job_id=job_id, total_count=total_count)
            self._jobs[job_id] = job
            self._locks[job_id] = threading.Lock()
            return copy.deepcopy(job)

    def get_job(self, job_id: str, *, include_results: bool = True) -> Job | None:
        """Return a snapshot copy of a job, or None if absent.

        With ``include_results=False`` the snapshot's ``results`` list is
        empty, which keeps frequent progress polls cheap on large jobs.
        """
        entry = self._entry(job_id)
        if entry is None:
            return None
        job, lock = entry
        with lock:
            if include_results:
                return copy.deepcopy(job)
            return copy.deepcopy(dataclasses.replace(job, results=[]))

    def update_job(self, job_id: str, /, **fields: Any) -> Job | None:
        """Merge fields into an existing job.

        No-op (returns None) when the job is absent.

        Raises:
            ValueError: On unknown or immutable field names.
            JobStateError: When changing non-artifact fields of a terminal job.
        """
        unknown = set(fields) - _JOB_FIELDS
        if unknown:
            msg = f"Unknown job fields: {sorted(unknown)}"
            raise ValueError(msg)
        immutable = set(fields) & _IMMUTABLE_FIELDS
        if immutable:
            msg = f"Job fields cannot be updated directly: {sorted(immutable)}"
            raise ValueError(msg)

        entry = self._entry(job_id)
        if entry is None:
            return None
        job, lock = entry
        with lock:
            if job.is_terminal and not set(fields) <= _POST_TERMINAL_FIELDS:
                msg = f"Job {job_id} is {job.status} and can no longer change"
                raise JobStateError(msg)
            for name, value in fields.items():
                setattr(job, name, value)
            return copy.deepcopy(job)

    def record_item(
        self,
        job_id: str,
        *,
        success: bool,
        current_address: str | None = None,
        checkpoint_interval: int | None = None,
    ) -> Job | None:
        """Count one processed row and append a checkpoint on interval boundaries.

        Args:
            job_id: Job identifier.
            success: Whether the row succeeded.
            current_address: Latest address marker for progress readers.
            checkpoint_interval: Append a checkpoint whenever the new processed
                count is a multiple of this value.

        Returns:
            Snapshot after the update, or None if the job is absent.

        Raises:
            JobStateError: If the job is not ``processing`` or already counted every row.
        """
        entry = self._entry(job_id)
        if entry is None:
            return None
        job, lock = entry
        with lock:
            if job.status != JobStatus.PROCESSING:
                msg = f"Job {job_id} is {job.status}; items can only be recorded while processing"
                raise JobStateError(msg)
            if job.processed_count >= job.total_count:
                msg = f"Job {job_id} already processed all {job.total_count} items"
                raise JobStateError(msg)

            job.processed_count += 1
            if success:
                job.success_count += 1
            else:
                job.failed_count += 1
            if current_address is not None:
                job.current_address = current_address

            if checkpoint_interval and job.processed_count % checkpoint_interval == 0:
                job.checkpoints.append(self._checkpoint_of(job))
                logger.info(f"Checkpoint for job {job_id}: {job.processed_count}/{job.total_count}")
            return copy.deepcopy(job)

    def add_checkpoint(self, job_id: str) -> Checkpoint | None:
        """Append a checkpoint built from the job's current counters.

        Raises:
            JobStateError: If the job is already terminal.
        """
        entry = self._entry(job_id)
        if entry is None:
            return None
        job, lock = entry
        with lock:
            if job.is_terminal:
                msg = f"Job {job_id} is {job.status}; checkpoints can no longer be added"
                raise JobStateError(msg)
            checkpoint = self._checkpoint_of(job)
            job.checkpoints.append(checkpoint)
            return dataclasses.replace(checkpoint)

    def delete_job(self, job_id: str) -> bool:
        """Evict a job. Returns True if it existed."""
        with self._registry_lock:
            self._locks.pop(job_id, None)
            return self._jobs.pop(job_id, None) is not None

    def list_job_ids(self) -> list[str]:
        """IDs of all retained jobs, in creation order."""
        with self._registry_lock:
            return list(self._jobs.keys())

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs

    @staticmethod
    def _checkpoint_of(job: Job) -> Checkpoint:
        return Checkpoint(
            timestamp=datetime.now(UTC),
            processed_count=job.processed_count,
            success_count=job.success_count,
            failed_count=job.failed_count,
        )
