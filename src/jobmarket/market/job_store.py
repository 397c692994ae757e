"""Job store — the authoritative map from job id to Job record.

Job ids come from a monotonically increasing counter starting at 1.
Ids are never reused and jobs are never deleted: completed, cancelled
and disputed jobs stay in the store for audit.

Only JobLifecycle writes to this store. Reads return None for missing
ids rather than a default record.
"""

from __future__ import annotations

from typing import Iterator, Optional

from jobmarket.models.job import Job, JobStatus


class JobStore:
    """In-memory job table plus the next-id counter."""

    def __init__(self) -> None:
        self._jobs: dict[int, Job] = {}
        self._next_job_id = 1

    def create(
        self,
        client: str,
        title: str,
        description: str,
        budget: int,
        deadline: int,
        bid_deadline: int,
        created_at: int,
    ) -> Job:
        """Insert a new job in OPEN status under the next sequential id."""
        job = Job(
            job_id=self._next_job_id,
            client=client,
            title=title,
            description=description,
            budget=budget,
            deadline=deadline,
            bid_deadline=bid_deadline,
            created_at=created_at,
            status=JobStatus.OPEN,
        )
        self._jobs[job.job_id] = job
        self._next_job_id += 1
        return job

    def get(self, job_id: int) -> Optional[Job]:
        return self._jobs.get(job_id)

    def exists(self, job_id: int) -> bool:
        return job_id in self._jobs

    def __iter__(self) -> Iterator[Job]:
        return iter(self._jobs.values())

    @property
    def count(self) -> int:
        return len(self._jobs)

    @property
    def next_job_id(self) -> int:
        return self._next_job_id

    def undo_create(self, job_id: int) -> None:
        """Roll back the most recent create before it was committed.

        The id was never visible to any caller, so handing it out again
        does not break id uniqueness.
        """
        if job_id != self._next_job_id - 1 or job_id not in self._jobs:
            raise ValueError(f"Job {job_id} is not the most recent uncommitted job")
        del self._jobs[job_id]
        self._next_job_id = job_id

    def load(self, jobs: list[Job], next_job_id: int) -> None:
        """Replace contents with persisted records.

        Raises ValueError if next_job_id would reuse an existing id.
        """
        by_id = {job.job_id: job for job in jobs}
        if len(by_id) != len(jobs):
            raise ValueError("Duplicate job IDs in persisted state")
        if by_id and next_job_id <= max(by_id):
            raise ValueError(
                f"next_job_id {next_job_id} would reuse existing job id {max(by_id)}"
            )
        if next_job_id < 1:
            raise ValueError(f"next_job_id must be >= 1, got {next_job_id}")
        self._jobs = by_id
        self._next_job_id = next_job_id
