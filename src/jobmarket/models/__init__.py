"""Core data models for the job marketplace."""

from jobmarket.models.job import (
    ASSIGNED_STATUSES,
    TERMINAL_STATUSES,
    Bid,
    Job,
    JobStatus,
)

__all__ = [
    "ASSIGNED_STATUSES",
    "TERMINAL_STATUSES",
    "Bid",
    "Job",
    "JobStatus",
]
