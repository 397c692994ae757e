"""State store — JSON snapshot of the marketplace tables.

Persisted layout:
    jobs         list of job records
    bids         list of bid records
    bid_counts   {job_id: live bid count}
    admin        administrator identity
    paused       pause flag
    next_job_id  monotonic id counter
    event_count  audit events the snapshot reflects

Writes go to a sibling temporary file which then replaces the target,
so a crash mid-write leaves the previous snapshot intact.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from jobmarket.models.job import Bid, Job


@dataclass
class MarketState:
    """Plain-data form of everything the marketplace persists."""
    admin: str
    paused: bool = False
    next_job_id: int = 1
    jobs: list[Job] = field(default_factory=list)
    bids: list[Bid] = field(default_factory=list)
    bid_counts: dict[int, int] = field(default_factory=dict)
    event_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "admin": self.admin,
            "paused": self.paused,
            "next_job_id": self.next_job_id,
            "event_count": self.event_count,
            "jobs": [j.to_dict() for j in sorted(self.jobs, key=lambda j: j.job_id)],
            "bids": [
                b.to_dict()
                for b in sorted(self.bids, key=lambda b: (b.job_id, b.bidder))
            ],
            # JSON object keys are strings
            "bid_counts": {str(k): v for k, v in sorted(self.bid_counts.items())},
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> MarketState:
        return MarketState(
            admin=data["admin"],
            paused=bool(data.get("paused", False)),
            next_job_id=int(data.get("next_job_id", 1)),
            jobs=[Job.from_dict(j) for j in data.get("jobs", [])],
            bids=[Bid.from_dict(b) for b in data.get("bids", [])],
            bid_counts={int(k): int(v) for k, v in data.get("bid_counts", {}).items()},
            event_count=int(data.get("event_count", 0)),
        )


class StateStore:
    """File-backed snapshot store."""

    def __init__(self, storage_path: Path) -> None:
        self._storage_path = storage_path

    @property
    def path(self) -> Path:
        return self._storage_path

    def exists(self) -> bool:
        return self._storage_path.exists()

    def load(self) -> Optional[MarketState]:
        """Return the stored state, or None if nothing has been saved yet."""
        if not self._storage_path.exists():
            return None
        with self._storage_path.open("r", encoding="utf-8") as f:
            return MarketState.from_dict(json.load(f))

    def save(self, state: MarketState) -> None:
        """Write the snapshot. Raises OSError on I/O failure."""
        self._storage_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._storage_path.with_name(self._storage_path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2, sort_keys=True)
            f.write("\n")
        tmp_path.replace(self._storage_path)
