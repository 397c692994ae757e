"""Collaborator hooks — escrow, reputation and dispute voting react here.

Those collaborators live outside the marketplace core. They subscribe a
callback per hook kind and receive a copy of the job after the
transition has been committed. They can read but never write marketplace
state, so a failing callback is logged and the transition stands.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable

from jobmarket.models.job import Job


logger = logging.getLogger(__name__)


class HookKind(str, enum.Enum):
    JOB_ASSIGNED = "job_assigned"
    JOB_COMPLETED = "job_completed"
    JOB_CANCELLED = "job_cancelled"
    JOB_DISPUTED = "job_disputed"


HookCallback = Callable[[Job], None]


class LifecycleHooks:
    """Registry of post-commit callbacks.

    Usage:
        hooks = LifecycleHooks()
        hooks.subscribe(HookKind.JOB_COMPLETED, escrow.release_for_job)
        lifecycle = JobLifecycle(config, clock, hooks=hooks)
    """

    def __init__(self) -> None:
        self._subscribers: dict[HookKind, list[HookCallback]] = {k: [] for k in HookKind}

    def subscribe(self, kind: HookKind, callback: HookCallback) -> None:
        self._subscribers[kind].append(callback)

    def unsubscribe(self, kind: HookKind, callback: HookCallback) -> None:
        try:
            self._subscribers[kind].remove(callback)
        except ValueError:
            raise ValueError(f"Callback not subscribed to {kind.value}") from None

    def subscribers(self, kind: HookKind) -> list[HookCallback]:
        return list(self._subscribers[kind])

    def fire(self, kind: HookKind, job: Job) -> int:
        """Invoke every subscriber with its own copy of job.

        Returns the number of callbacks that failed.
        """
        failures = 0
        for callback in self._subscribers[kind]:
            try:
                callback(job.copy())
            except Exception:
                failures += 1
                logger.exception(
                    "Hook %s failed for job %d", kind.value, job.job_id,
                )
        return failures
