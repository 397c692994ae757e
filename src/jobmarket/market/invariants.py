"""Invariant audit over a live marketplace.

Checks the global rules that every applied operation must preserve:
- bid count equals the number of live bids, per job
- every bid references an existing job
- assigned_to is set iff the job reached ASSIGNED or beyond
- status BIDDING iff the count is non-zero, for jobs not yet assigned
- bid_deadline <= deadline
- job ids run 1..job_count with no gaps

Returns human-readable violations (empty = OK). Used by tests and the
check-invariants CLI command.
"""

from __future__ import annotations

from jobmarket.market.lifecycle import JobLifecycle
from jobmarket.models.job import ASSIGNED_STATUSES, JobStatus


def check_invariants(lifecycle: JobLifecycle) -> list[str]:
    errors: list[str] = []
    jobs = lifecycle.job_store
    bids = lifecycle.bid_store

    live: dict[int, int] = {}
    for bid in bids:
        live[bid.job_id] = live.get(bid.job_id, 0) + 1
        if not jobs.exists(bid.job_id):
            errors.append(f"Bid by {bid.bidder} references unknown job {bid.job_id}")

    for job_id, count in bids.counter.snapshot().items():
        if count != live.get(job_id, 0):
            errors.append(
                f"Job {job_id}: bid count {count} != {live.get(job_id, 0)} live bids"
            )
    for job_id, count in live.items():
        if bids.count(job_id) != count:
            errors.append(
                f"Job {job_id}: bid count {bids.count(job_id)} != {count} live bids"
            )

    ids = sorted(job.job_id for job in jobs)
    if ids != list(range(1, len(ids) + 1)):
        errors.append(f"Job ids are not sequential from 1: {ids}")

    for job in jobs:
        assigned = job.assigned_to is not None
        if assigned != (job.status in ASSIGNED_STATUSES):
            errors.append(
                f"Job {job.job_id}: assigned_to={job.assigned_to!r} "
                f"inconsistent with status {job.status.value}"
            )
        count = bids.count(job.job_id)
        if job.status == JobStatus.BIDDING and count == 0:
            errors.append(f"Job {job.job_id}: status bidding with no live bids")
        if job.status == JobStatus.OPEN and count > 0:
            errors.append(f"Job {job.job_id}: status open with {count} live bids")
        if job.bid_deadline > job.deadline:
            errors.append(
                f"Job {job.job_id}: bid_deadline {job.bid_deadline} "
                f"after deadline {job.deadline}"
            )

    return errors
