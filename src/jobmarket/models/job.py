"""Job marketplace models — jobs, bids, and job status.

A client posts a job with a budget and two deadlines (bidding closes at
bid_deadline, work must be completed by deadline). Freelancers place
bids against open jobs; the client accepts one, and the accepted worker
moves the job through progress to completion or dispute.

Job lifecycle:
    OPEN ⇄ BIDDING → ASSIGNED → IN_PROGRESS → COMPLETED
    OPEN / BIDDING → CANCELLED
    IN_PROGRESS → DISPUTED

All time values are logical-clock heights supplied by the host ledger,
not wall-clock datetimes.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Any, Optional


class JobStatus(str, enum.Enum):
    """Lifecycle status of a job."""
    OPEN = "open"
    BIDDING = "bidding"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"


# Statuses in which a worker has been chosen and must stay recorded
ASSIGNED_STATUSES: frozenset[JobStatus] = frozenset({
    JobStatus.ASSIGNED,
    JobStatus.IN_PROGRESS,
    JobStatus.COMPLETED,
    JobStatus.DISPUTED,
})

TERMINAL_STATUSES: frozenset[JobStatus] = frozenset({
    JobStatus.COMPLETED,
    JobStatus.CANCELLED,
    JobStatus.DISPUTED,
})


@dataclass
class Job:
    """A listed unit of work.

    client and created_at never change after creation. assigned_to is
    set once, on bid acceptance, and kept for audit afterwards.
    """
    job_id: int
    client: str
    title: str
    description: str
    budget: int
    deadline: int
    bid_deadline: int
    created_at: int
    status: JobStatus = JobStatus.OPEN
    assigned_to: Optional[str] = None

    def copy(self) -> Job:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "client": self.client,
            "title": self.title,
            "description": self.description,
            "budget": self.budget,
            "deadline": self.deadline,
            "bid_deadline": self.bid_deadline,
            "created_at": self.created_at,
            "status": self.status.value,
            "assigned_to": self.assigned_to,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Job:
        return Job(
            job_id=int(data["job_id"]),
            client=data["client"],
            title=data["title"],
            description=data["description"],
            budget=int(data["budget"]),
            deadline=int(data["deadline"]),
            bid_deadline=int(data["bid_deadline"]),
            created_at=int(data["created_at"]),
            status=JobStatus(data["status"]),
            assigned_to=data.get("assigned_to"),
        )


@dataclass
class Bid:
    """A freelancer's offer on a job. At most one live bid per (job, bidder)."""
    job_id: int
    bidder: str
    amount: int
    proposed_time: int
    bid_at: int

    def copy(self) -> Bid:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "bidder": self.bidder,
            "amount": self.amount,
            "proposed_time": self.proposed_time,
            "bid_at": self.bid_at,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Bid:
        return Bid(
            job_id=int(data["job_id"]),
            bidder=data["bidder"],
            amount=int(data["amount"]),
            proposed_time=int(data["proposed_time"]),
            bid_at=int(data["bid_at"]),
        )
