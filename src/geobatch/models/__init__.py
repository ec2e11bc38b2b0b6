"""Domain models for batch geocoding jobs."""

from geobatch.models.job import ArtifactStatus, Checkpoint, Job, JobStatus, ProcessedAddress, RowStatus

__all__ = [
    "ArtifactStatus",
    "Checkpoint",
    "Job",
    "JobStatus",
    "ProcessedAddress",
    "RowStatus",
]
