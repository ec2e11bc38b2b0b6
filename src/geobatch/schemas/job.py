"""Pydantic v2 schemas for batch job progress."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from geobatch.models.job import ArtifactStatus, Job, JobStatus


class JobProgressResponse(BaseModel):
    """Progress view of a batch job with derived speed and ETA."""

    job_id: str
    status: JobStatus
    total_count: int
    processed_count: int
    success_count: int
    failed_count: int
    progress_percent: int = Field(..., ge=0, le=100)
    processing_speed: float = Field(..., ge=0, description="Rows per second")
    estimated_time_remaining: int | None = Field(None, description="Seconds until completion")
    current_address: str | None = None
    error: str | None = None
    checkpoint_count: int = 0
    artifact_status: ArtifactStatus
    artifact_error: str | None = None
    created_at: datetime
    started_at: datetime | None = None
    ended_at: datetime | None = None

    @classmethod
    def from_job(cls, job: Job, now: datetime | None = None) -> "JobProgressResponse":
        """Build a progress response from a job snapshot.

        Elapsed time runs from ``started_at`` (or ``created_at`` if the job
        never started) to ``ended_at``, or to ``now`` while the job is live.

        Args:
            job: Job snapshot.
            now: Reference time; defaults to the current UTC time.

        Returns:
            The progress response.
        """
        now = now or datetime.now(UTC)
        progress = round(job.processed_count / job.total_count * 100) if job.total_count else 0

        start = job.started_at or job.created_at
        end = job.ended_at or now
        elapsed = max((end - start).total_seconds(), 0.0)
        speed = job.processed_count / elapsed if elapsed > 0 and job.processed_count > 0 else 0.0

        eta = None
        if speed > 0:
            remaining = max(job.total_count - job.processed_count, 0)
            eta = round(remaining / speed)

        return cls(
            job_id=job.job_id,
            status=job.status,
            total_count=job.total_count,
            processed_count=job.processed_count,
            success_count=job.success_count,
            failed_count=job.failed_count,
            progress_percent=min(progress, 100),
            processing_speed=speed,
            estimated_time_remaining=eta,
            current_address=job.current_address,
            error=job.error,
            checkpoint_count=len(job.checkpoints),
            artifact_status=job.artifact_status,
            artifact_error=job.artifact_error,
            created_at=job.created_at,
            started_at=job.started_at,
            ended_at=job.ended_at,
        )
