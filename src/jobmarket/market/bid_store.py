"""Bid store and bid counter.

BidStore is the authoritative map from (job id, bidder) to Bid.
BidCounter caches the number of live bids per job. The counter is never
written on its own: BidStore.insert and BidStore.remove update both in
the same step, so the cache cannot drift from the table.

An accepted bid stays in the store (it is superseded, not deleted), so
the count for an assigned job still includes it.
"""

from __future__ import annotations

from typing import Iterator, Optional

from jobmarket.models.job import Bid


class BidCounter:
    """Per-job count of live bids. Unknown jobs count as zero."""

    def __init__(self) -> None:
        self._counts: dict[int, int] = {}

    def get(self, job_id: int) -> int:
        return self._counts.get(job_id, 0)

    def increment(self, job_id: int) -> int:
        self._counts[job_id] = self.get(job_id) + 1
        return self._counts[job_id]

    def decrement(self, job_id: int) -> int:
        current = self.get(job_id)
        if current <= 0:
            raise ValueError(f"Bid count for job {job_id} is already zero")
        self._counts[job_id] = current - 1
        return self._counts[job_id]

    def snapshot(self) -> dict[int, int]:
        return dict(self._counts)

    def restore(self, counts: dict[int, int]) -> None:
        self._counts = dict(counts)


class BidStore:
    """Bids indexed by job, one per bidder."""

    def __init__(self, counter: Optional[BidCounter] = None) -> None:
        self._bids: dict[tuple[int, str], Bid] = {}
        self._counter = counter if counter is not None else BidCounter()

    @property
    def counter(self) -> BidCounter:
        return self._counter

    def insert(self, bid: Bid) -> int:
        """Insert a bid and bump the job's count. Returns the new count.

        Raises ValueError on a duplicate (job, bidder) key; the lifecycle
        checks for that before calling.
        """
        key = (bid.job_id, bid.bidder)
        if key in self._bids:
            raise ValueError(f"Bid already exists: job {bid.job_id}, bidder {bid.bidder}")
        self._bids[key] = bid
        return self._counter.increment(bid.job_id)

    def remove(self, job_id: int, bidder: str) -> int:
        """Delete a bid and lower the job's count. Returns the new count."""
        key = (job_id, bidder)
        if key not in self._bids:
            raise ValueError(f"Unknown bid: job {job_id}, bidder {bidder}")
        del self._bids[key]
        return self._counter.decrement(job_id)

    def get(self, job_id: int, bidder: str) -> Optional[Bid]:
        return self._bids.get((job_id, bidder))

    def exists(self, job_id: int, bidder: str) -> bool:
        return (job_id, bidder) in self._bids

    def for_job(self, job_id: int) -> list[Bid]:
        return [b for (jid, _), b in self._bids.items() if jid == job_id]

    def __iter__(self) -> Iterator[Bid]:
        return iter(self._bids.values())

    def count(self, job_id: int) -> int:
        return self._counter.get(job_id)

    def load(self, bids: list[Bid], counts: dict[int, int]) -> None:
        """Replace contents with persisted records.

        Fail-closed: a persisted counter that disagrees with the bid
        table is rejected rather than silently repaired.
        """
        table: dict[tuple[int, str], Bid] = {}
        for bid in bids:
            key = (bid.job_id, bid.bidder)
            if key in table:
                raise ValueError(f"Duplicate bid in persisted state: {key}")
            table[key] = bid
        actual: dict[int, int] = {}
        for job_id, _ in table:
            actual[job_id] = actual.get(job_id, 0) + 1
        for job_id in set(actual) | set(counts):
            if actual.get(job_id, 0) != counts.get(job_id, 0):
                raise ValueError(
                    f"Persisted bid count for job {job_id} is {counts.get(job_id, 0)} "
                    f"but {actual.get(job_id, 0)} bids are stored"
                )
        self._bids = table
        self._counter.restore(counts)
