"""Job state machine — valid status transitions.

Job lifecycle:
    OPEN ⇄ BIDDING → ASSIGNED → IN_PROGRESS → COMPLETED
    OPEN / BIDDING → CANCELLED
    IN_PROGRESS → DISPUTED

Two sources of transitions exist and are kept apart:
- Caller-driven transitions (accept, start, complete, cancel, dispute)
  are validated against _TRANSITIONS.
- OPEN ⇄ BIDDING is never requested by a caller. It is re-derived from
  the bid count by derive_status() after every bid insert or removal.

COMPLETED, CANCELLED and DISPUTED are terminal.
"""

from __future__ import annotations

from jobmarket.models.job import TERMINAL_STATUSES, Job, JobStatus


# Caller-driven transitions: {from_status: {allowed_to_statuses}}
_TRANSITIONS: dict[JobStatus, set[JobStatus]] = {
    JobStatus.OPEN: {JobStatus.ASSIGNED, JobStatus.CANCELLED},
    JobStatus.BIDDING: {JobStatus.ASSIGNED, JobStatus.CANCELLED},
    JobStatus.ASSIGNED: {JobStatus.IN_PROGRESS},
    JobStatus.IN_PROGRESS: {JobStatus.COMPLETED, JobStatus.DISPUTED},
    # Terminal statuses — no outgoing transitions
    JobStatus.COMPLETED: set(),
    JobStatus.CANCELLED: set(),
    JobStatus.DISPUTED: set(),
}


def derive_status(current: JobStatus, bid_count: int) -> JobStatus:
    """Re-derive OPEN/BIDDING from the live bid count.

    Only OPEN and BIDDING respond to the count; every other status is
    returned unchanged.
    """
    if current == JobStatus.OPEN and bid_count > 0:
        return JobStatus.BIDDING
    if current == JobStatus.BIDDING and bid_count == 0:
        return JobStatus.OPEN
    return current


class JobStateMachine:
    """Validates and applies caller-driven status transitions.

    Pure computation: no persistence or event recording. The lifecycle
    decides which error code a rejected transition maps to.
    """

    @staticmethod
    def validate_transition(job: Job, target: JobStatus) -> list[str]:
        """Check if a transition is valid. Returns errors (empty = OK)."""
        current = job.status
        allowed = _TRANSITIONS.get(current, set())

        if target not in allowed:
            allowed_str = ", ".join(s.value for s in sorted(allowed, key=lambda x: x.value))
            return [
                f"Invalid job transition: {current.value} → {target.value}. "
                f"Allowed from {current.value}: [{allowed_str}]"
            ]
        return []

    @staticmethod
    def apply_transition(job: Job, target: JobStatus) -> list[str]:
        """Validate and apply a transition. Mutates job.status on success."""
        errors = JobStateMachine.validate_transition(job, target)
        if errors:
            return errors
        job.status = target
        return []

    @staticmethod
    def is_terminal(status: JobStatus) -> bool:
        return status in TERMINAL_STATUSES

    @staticmethod
    def valid_transitions(status: JobStatus) -> set[JobStatus]:
        """Return the caller-driven targets reachable from status."""
        return set(_TRANSITIONS.get(status, set()))
