"""Batch job domain models — job progress, checkpoints, and per-row outcomes."""

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime


class JobStatus(enum.StrEnum):
    """Lifecycle state of a batch job: pending → processing → completed | failed."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class ArtifactStatus(enum.StrEnum):
    """Whether result files for a job have been durably written."""

    PENDING = "pending"
    WRITTEN = "written"
    FAILED = "failed"


class RowStatus(enum.StrEnum):
    """Final outcome of one input row."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class Checkpoint:
    """Snapshot of a job's counters at one point in processing."""

    timestamp: datetime
    processed_count: int
    success_count: int
    failed_count: int


@dataclass
class ProcessedAddress:
    """One input row's outcome: normalization plus geocoding."""

    original_address: str
    normalized_address: str
    status: RowStatus
    confidence: float = 0
    latitude: float | None = None
    longitude: float | None = None
    road_address: str | None = None
    jibun_address: str | None = None
    error: str | None = None
    in_service_area: bool | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == RowStatus.SUCCESS


@dataclass
class Job:
    """Progress state of one batch geocoding run.

    Counters satisfy ``success_count + failed_count <= processed_count <= total_count``.
    """

    job_id: str
    total_count: int
    status: JobStatus = JobStatus.PENDING
    processed_count: int = 0
    success_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    started_at: datetime | None = None
    ended_at: datetime | None = None
    current_address: str | None = None
    error: str | None = None
    checkpoints: list[Checkpoint] = field(default_factory=list)
    results: list[ProcessedAddress] = field(default_factory=list)
    artifact_status: ArtifactStatus = ArtifactStatus.PENDING
    artifact_error: str | None = None
    artifact_paths: list[str] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
