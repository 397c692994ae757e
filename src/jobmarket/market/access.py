"""Access control — who may act on a job.

Pure derivations over the job store and the configured administrator.
No state of its own and no side effects.
"""

from __future__ import annotations

from jobmarket.market.job_store import JobStore


class AccessControl:
    """Caller predicates used by the lifecycle."""

    def __init__(self, admin: str, jobs: JobStore) -> None:
        self._admin = admin
        self._jobs = jobs

    @property
    def admin(self) -> str:
        return self._admin

    def is_admin(self, caller: str) -> bool:
        return caller == self._admin

    def is_client(self, job_id: int, caller: str) -> bool:
        """False when the job does not exist."""
        job = self._jobs.get(job_id)
        return job is not None and job.client == caller

    def is_assigned_worker(self, job_id: int, caller: str) -> bool:
        job = self._jobs.get(job_id)
        return job is not None and job.assigned_to is not None and job.assigned_to == caller

    def is_party(self, job_id: int, caller: str) -> bool:
        """Client or assigned worker."""
        return self.is_client(job_id, caller) or self.is_assigned_worker(job_id, caller)
