"""Job lifecycle — the single entry point for every marketplace operation.

Every mutating operation follows the same shape:
1. Gate checks in a fixed order (pause, identity, job id, access,
   status, deadlines, field validation). The first failing check wins
   and its error code is returned; nothing has been mutated yet.
2. Apply the job, bid and bid-count changes together.
3. Commit: append the audit event. If that fails the changes are rolled
   back and CommitError is raised, so no call is ever half-applied.
4. Persist the snapshot and notify collaborator hooks.

The check order is part of the public contract: integrators rely on
which code comes back when several conditions fail at once.

Bidding note: place_bid only accepts bids while the job is OPEN, and
the first bid moves the job to BIDDING. A second bidder is therefore
refused with JOB_NOT_OPEN until the live bid is withdrawn, so at most
one bid is live on a job at a time.

Operations are applied one at a time by the host ledger. There is no
locking here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from jobmarket.config import MarketConfig
from jobmarket.errors import DEFAULT_MESSAGES, CommitError, ErrorCode
from jobmarket.market.access import AccessControl
from jobmarket.market.bid_store import BidStore
from jobmarket.market.clock import LogicalClock
from jobmarket.market.hooks import HookKind, LifecycleHooks
from jobmarket.market.job_store import JobStore
from jobmarket.market.pause import PauseSwitch
from jobmarket.market.status import JobStateMachine, derive_status
from jobmarket.models.job import Bid, Job, JobStatus
from jobmarket.persistence.event_log import EventKind, EventLog, EventRecord
from jobmarket.persistence.state_store import MarketState, StateStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LifecycleResult:
    """Result of a marketplace operation or query."""
    success: bool
    value: Any = None
    error: Optional[ErrorCode] = None
    errors: list[str] = field(default_factory=list)


def _ok(value: Any = True) -> LifecycleResult:
    return LifecycleResult(success=True, value=value)


def _fail(code: ErrorCode, detail: Optional[str] = None) -> LifecycleResult:
    return LifecycleResult(
        success=False,
        error=code,
        errors=[detail or DEFAULT_MESSAGES[code]],
    )


class JobLifecycle:
    """Job marketplace state machine and query surface.

    Usage:
        clock = LogicalClock(100)
        market = JobLifecycle(MarketConfig(), clock)

        result = market.create_job(client, "Web Development",
                                   "Build a website", 1000, 200, 150)
        job_id = result.value
        market.place_bid(worker, job_id, amount=800, proposed_time=10)
        market.accept_bid(client, job_id, worker)
        market.start_progress(worker, job_id)
        market.mark_completed(client, job_id)

    Persistence (optional):
        market = JobLifecycle(config, clock, event_log=log, state_store=store)
        # State is loaded on construction and saved after each operation.
    """

    def __init__(
        self,
        config: Optional[MarketConfig] = None,
        clock: Optional[LogicalClock] = None,
        hooks: Optional[LifecycleHooks] = None,
        event_log: Optional[EventLog] = None,
        state_store: Optional[StateStore] = None,
    ) -> None:
        self._config = config or MarketConfig()
        self._clock = clock or LogicalClock()
        self._hooks = hooks or LifecycleHooks()
        self._event_log = event_log
        self._state_store = state_store

        self._jobs = JobStore()
        self._bids = BidStore()
        self._pause = PauseSwitch()
        admin = self._config.admin

        stored = (
            state_store.load()
            if state_store is not None and state_store.exists()
            else None
        )
        if event_log is not None and state_store is not None:
            # Fail closed: a snapshot behind the audit log would reissue job ids
            covered = stored.event_count if stored is not None else 0
            if event_log.count != covered:
                raise ValueError(
                    f"State snapshot covers {covered} audit events but the log "
                    f"holds {event_log.count}; refusing to load stale state"
                )
        if stored is not None:
            if stored.admin != admin:
                logger.warning(
                    "Stored administrator %s overrides configured %s",
                    stored.admin, admin,
                )
            admin = stored.admin
            self._jobs.load(stored.jobs, stored.next_job_id)
            for bid in stored.bids:
                if not self._jobs.exists(bid.job_id):
                    raise ValueError(
                        f"Persisted bid by {bid.bidder} references unknown job {bid.job_id}"
                    )
            self._bids.load(stored.bids, stored.bid_counts)
            self._pause.set(stored.paused)

        self._access = AccessControl(admin, self._jobs)

        # Continue numbering from the persisted log to avoid ID collision
        self._event_counter = event_log.count if event_log is not None else 0

        # Set when a snapshot write fails after the audit event committed
        self._persistence_degraded: bool = False

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> MarketConfig:
        return self._config

    @property
    def clock(self) -> LogicalClock:
        return self._clock

    @property
    def hooks(self) -> LifecycleHooks:
        return self._hooks

    @property
    def access(self) -> AccessControl:
        return self._access

    @property
    def job_store(self) -> JobStore:
        return self._jobs

    @property
    def bid_store(self) -> BidStore:
        return self._bids

    @property
    def persistence_degraded(self) -> bool:
        return self._persistence_degraded

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def set_paused(self, caller: str, value: bool) -> LifecycleResult:
        """Flip the pause switch. Administrator only."""
        if not self._access.is_admin(caller):
            return self._reject("set_paused", ErrorCode.NOT_AUTHORIZED)

        previous = self._pause.active
        self._pause.set(value)

        def _rollback() -> None:
            self._pause.set(previous)

        self._commit(
            EventKind.PAUSE_CHANGED, caller, {"paused": self._pause.active}, _rollback,
        )
        logger.info("Marketplace %s by %s", "paused" if value else "unpaused", caller)
        return _ok(self._pause.active)

    # ------------------------------------------------------------------
    # Job creation and editing
    # ------------------------------------------------------------------

    def create_job(
        self,
        caller: str,
        title: str,
        description: str,
        budget: int,
        deadline: int,
        bid_deadline: int,
    ) -> LifecycleResult:
        """Post a new job in OPEN status. Success value is the new job id."""
        op = "create_job"
        if self._pause.active:
            return self._reject(op, ErrorCode.PAUSED)
        if not caller:
            return self._reject(op, ErrorCode.INVALID_IDENTITY)

        now = self._clock.now()
        rejected = self._validate_details(
            op,
            now,
            title=title,
            description=description,
            budget=budget,
            deadlines=(deadline, bid_deadline),
        )
        if rejected is not None:
            return rejected

        job = self._jobs.create(
            client=caller,
            title=title,
            description=description,
            budget=budget,
            deadline=deadline,
            bid_deadline=bid_deadline,
            created_at=now,
        )

        def _rollback() -> None:
            self._jobs.undo_create(job.job_id)

        self._commit(
            EventKind.JOB_CREATED,
            caller,
            {
                "job_id": job.job_id,
                "budget": budget,
                "deadline": deadline,
                "bid_deadline": bid_deadline,
            },
            _rollback,
        )
        logger.info("Job %d created by %s (budget %d)", job.job_id, caller, budget)
        return _ok(job.job_id)

    def edit_job(
        self,
        caller: str,
        job_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        budget: Optional[int] = None,
        deadline: Optional[int] = None,
        bid_deadline: Optional[int] = None,
    ) -> LifecycleResult:
        """Change any supplied field of an OPEN job. Client only.

        Each supplied field is revalidated with the create_job rules. When
        either deadline is supplied, the resulting pair (the new value and
        the other's stored value) must both lie in the future with
        bid_deadline <= deadline. An edit that supplies no fields succeeds
        without recording an event.
        """
        op = "edit_job"
        rejected = self._gate(op, caller, job_id)
        if rejected is not None:
            return rejected
        if not self._access.is_client(job_id, caller):
            return self._reject(op, ErrorCode.NOT_CLIENT)
        job = self._jobs.get(job_id)
        if job is None:
            return self._reject(op, ErrorCode.JOB_NOT_FOUND)
        if job.status != JobStatus.OPEN:
            return self._reject(op, ErrorCode.EDIT_NOT_ALLOWED)

        updates: dict[str, Any] = {
            name: value
            for name, value in (
                ("title", title),
                ("description", description),
                ("budget", budget),
                ("deadline", deadline),
                ("bid_deadline", bid_deadline),
            )
            if value is not None
        }
        deadlines = None
        if deadline is not None or bid_deadline is not None:
            deadlines = (
                deadline if deadline is not None else job.deadline,
                bid_deadline if bid_deadline is not None else job.bid_deadline,
            )
        rejected = self._validate_details(
            op,
            self._clock.now(),
            title=title,
            description=description,
            budget=budget,
            deadlines=deadlines,
        )
        if rejected is not None:
            return rejected
        if not updates:
            # Nothing to change, nothing to audit
            return _ok()

        previous = job.copy()
        for name, value in updates.items():
            setattr(job, name, value)

        def _rollback() -> None:
            for name in updates:
                setattr(job, name, getattr(previous, name))

        self._commit(
            EventKind.JOB_EDITED,
            caller,
            {"job_id": job_id, "fields": sorted(updates)},
            _rollback,
        )
        logger.info("Job %d edited by %s: %s", job_id, caller, ", ".join(sorted(updates)))
        return _ok()

    # ------------------------------------------------------------------
    # Bids
    # ------------------------------------------------------------------

    def place_bid(
        self,
        caller: str,
        job_id: int,
        amount: int,
        proposed_time: int,
    ) -> LifecycleResult:
        """Place a bid on an OPEN job before its bid deadline."""
        op = "place_bid"
        rejected = self._gate(op, caller, job_id)
        if rejected is not None:
            return rejected
        job = self._jobs.get(job_id)
        if job is None:
            return self._reject(op, ErrorCode.JOB_NOT_FOUND)
        if job.status != JobStatus.OPEN:
            return self._reject(
                op, ErrorCode.JOB_NOT_OPEN,
                f"Job {job_id} is not open for bidding (status: {job.status.value})",
            )
        now = self._clock.now()
        if now > job.bid_deadline:
            return self._reject(
                op, ErrorCode.DEADLINE_PASSED,
                f"Bid deadline {job.bid_deadline} passed (now {now})",
            )
        if amount < self._config.min_bid_amount or amount > job.budget:
            return self._reject(
                op, ErrorCode.INVALID_BID_AMOUNT,
                f"Bid {amount} outside [{self._config.min_bid_amount}, {job.budget}]",
            )
        if proposed_time <= 0:
            return self._reject(op, ErrorCode.INVALID_TIME)
        if self._bids.exists(job_id, caller):
            return self._reject(op, ErrorCode.BID_ALREADY_EXISTS)

        prior_status = job.status
        bid = Bid(
            job_id=job_id,
            bidder=caller,
            amount=amount,
            proposed_time=proposed_time,
            bid_at=now,
        )
        count = self._bids.insert(bid)
        job.status = derive_status(job.status, count)

        def _rollback() -> None:
            self._bids.remove(job_id, caller)
            job.status = prior_status

        self._commit(
            EventKind.BID_PLACED,
            caller,
            {"job_id": job_id, "amount": amount, "proposed_time": proposed_time},
            _rollback,
        )
        logger.info("Bid of %d placed on job %d by %s", amount, job_id, caller)
        return _ok()

    def withdraw_bid(self, caller: str, job_id: int) -> LifecycleResult:
        """Remove the caller's live bid while the job is OPEN or BIDDING."""
        op = "withdraw_bid"
        rejected = self._gate(op, caller, job_id)
        if rejected is not None:
            return rejected
        job = self._jobs.get(job_id)
        if job is None:
            return self._reject(op, ErrorCode.JOB_NOT_FOUND)
        if job.status not in (JobStatus.OPEN, JobStatus.BIDDING):
            return self._reject(op, ErrorCode.INVALID_STATUS)
        bid = self._bids.get(job_id, caller)
        if bid is None:
            return self._reject(
                op, ErrorCode.JOB_NOT_FOUND, f"No bid by {caller} on job {job_id}",
            )

        prior_status = job.status
        count = self._bids.remove(job_id, caller)
        job.status = derive_status(job.status, count)

        def _rollback() -> None:
            self._bids.insert(bid)
            job.status = prior_status

        self._commit(EventKind.BID_WITHDRAWN, caller, {"job_id": job_id}, _rollback)
        logger.info("Bid on job %d withdrawn by %s", job_id, caller)
        return _ok()

    def accept_bid(self, caller: str, job_id: int, bidder: str) -> LifecycleResult:
        """Assign the job to bidder. Client only.

        The accepted bid stays in the bid store; the count is unchanged.
        """
        op = "accept_bid"
        rejected = self._gate(op, caller, job_id)
        if rejected is not None:
            return rejected
        if not self._access.is_client(job_id, caller):
            return self._reject(op, ErrorCode.NOT_CLIENT)
        job = self._jobs.get(job_id)
        if job is None:
            return self._reject(op, ErrorCode.JOB_NOT_FOUND)
        if job.status not in (JobStatus.OPEN, JobStatus.BIDDING):
            return self._reject(op, ErrorCode.INVALID_STATUS)
        if not bidder:
            return self._reject(op, ErrorCode.INVALID_IDENTITY)
        if not self._bids.exists(job_id, bidder):
            return self._reject(
                op, ErrorCode.JOB_NOT_FOUND, f"No bid by {bidder} on job {job_id}",
            )

        prior_status = job.status
        prior_assigned = job.assigned_to
        self._apply(job, JobStatus.ASSIGNED)
        job.assigned_to = bidder

        def _rollback() -> None:
            job.status = prior_status
            job.assigned_to = prior_assigned

        self._commit(
            EventKind.BID_ACCEPTED, caller, {"job_id": job_id, "bidder": bidder}, _rollback,
        )
        logger.info("Job %d assigned to %s", job_id, bidder)
        self._hooks.fire(HookKind.JOB_ASSIGNED, job)
        return _ok()

    # ------------------------------------------------------------------
    # Work progress
    # ------------------------------------------------------------------

    def start_progress(self, caller: str, job_id: int) -> LifecycleResult:
        """ASSIGNED → IN_PROGRESS. Assigned worker only."""
        op = "start_progress"
        rejected = self._gate(op, caller, job_id)
        if rejected is not None:
            return rejected
        job = self._jobs.get(job_id)
        if job is None:
            return self._reject(op, ErrorCode.JOB_NOT_FOUND)
        if job.status != JobStatus.ASSIGNED:
            return self._reject(op, ErrorCode.INVALID_STATUS)
        if not self._access.is_assigned_worker(job_id, caller):
            return self._reject(op, ErrorCode.NOT_AUTHORIZED)

        return self._transition(
            job, JobStatus.IN_PROGRESS, EventKind.PROGRESS_STARTED, caller,
        )

    def mark_completed(self, caller: str, job_id: int) -> LifecycleResult:
        """IN_PROGRESS → COMPLETED, no later than the job deadline.

        Client or assigned worker.
        """
        op = "mark_completed"
        rejected = self._gate(op, caller, job_id)
        if rejected is not None:
            return rejected
        job = self._jobs.get(job_id)
        if job is None:
            return self._reject(op, ErrorCode.JOB_NOT_FOUND)
        if job.status != JobStatus.IN_PROGRESS:
            return self._reject(op, ErrorCode.INVALID_STATUS)
        if not self._access.is_party(job_id, caller):
            return self._reject(op, ErrorCode.NOT_AUTHORIZED)
        now = self._clock.now()
        if now > job.deadline:
            return self._reject(
                op, ErrorCode.DEADLINE_PASSED,
                f"Job deadline {job.deadline} passed (now {now})",
            )

        return self._transition(
            job, JobStatus.COMPLETED, EventKind.JOB_COMPLETED, caller,
            hook=HookKind.JOB_COMPLETED,
        )

    def mark_disputed(self, caller: str, job_id: int) -> LifecycleResult:
        """IN_PROGRESS → DISPUTED. Client or assigned worker."""
        op = "mark_disputed"
        rejected = self._gate(op, caller, job_id)
        if rejected is not None:
            return rejected
        job = self._jobs.get(job_id)
        if job is None:
            return self._reject(op, ErrorCode.JOB_NOT_FOUND)
        if job.status != JobStatus.IN_PROGRESS:
            return self._reject(op, ErrorCode.INVALID_STATUS)
        if not self._access.is_party(job_id, caller):
            return self._reject(op, ErrorCode.NOT_AUTHORIZED)

        return self._transition(
            job, JobStatus.DISPUTED, EventKind.JOB_DISPUTED, caller,
            hook=HookKind.JOB_DISPUTED,
        )

    def cancel_job(self, caller: str, job_id: int) -> LifecycleResult:
        """OPEN / BIDDING → CANCELLED. Client only.

        A live bid on a cancelled job is left in place; it can no longer
        be withdrawn or accepted.
        """
        op = "cancel_job"
        rejected = self._gate(op, caller, job_id)
        if rejected is not None:
            return rejected
        if not self._access.is_client(job_id, caller):
            return self._reject(op, ErrorCode.NOT_CLIENT)
        job = self._jobs.get(job_id)
        if job is None:
            return self._reject(op, ErrorCode.JOB_NOT_FOUND)
        if job.status not in (JobStatus.OPEN, JobStatus.BIDDING):
            return self._reject(op, ErrorCode.CANCEL_NOT_ALLOWED)

        return self._transition(
            job, JobStatus.CANCELLED, EventKind.JOB_CANCELLED, caller,
            hook=HookKind.JOB_CANCELLED,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_job(self, job_id: int) -> LifecycleResult:
        job, rejected = self._lookup(job_id)
        if rejected is not None:
            return rejected
        return _ok(job.copy())

    def get_bid(self, job_id: int, bidder: str) -> LifecycleResult:
        if job_id <= 0:
            return _fail(ErrorCode.INVALID_JOB_ID)
        bid = self._bids.get(job_id, bidder)
        if bid is None:
            return _fail(ErrorCode.JOB_NOT_FOUND, f"No bid by {bidder} on job {job_id}")
        return _ok(bid.copy())

    def get_bid_count(self, job_id: int) -> LifecycleResult:
        """Live bid count; zero for unknown jobs."""
        if job_id <= 0:
            return _fail(ErrorCode.INVALID_JOB_ID)
        return _ok(self._bids.count(job_id))

    def get_job_count(self) -> LifecycleResult:
        return _ok(self._jobs.count)

    def get_admin(self) -> LifecycleResult:
        return _ok(self._access.admin)

    def is_paused(self) -> LifecycleResult:
        return _ok(self._pause.active)

    def get_status(self, job_id: int) -> LifecycleResult:
        job, rejected = self._lookup(job_id)
        if rejected is not None:
            return rejected
        return _ok(job.status)

    def get_assigned_worker(self, job_id: int) -> LifecycleResult:
        """Success value is None until a bid has been accepted."""
        job, rejected = self._lookup(job_id)
        if rejected is not None:
            return rejected
        return _ok(job.assigned_to)

    def status(self) -> dict[str, Any]:
        """Summary for operators."""
        counts: dict[str, int] = {}
        for job in self._jobs:
            counts[job.status.value] = counts.get(job.status.value, 0) + 1
        return {
            "admin": self._access.admin,
            "paused": self._pause.active,
            "block_height": self._clock.now(),
            "job_count": self._jobs.count,
            "next_job_id": self._jobs.next_job_id,
            "jobs_by_status": counts,
            "live_bids": sum(1 for _ in self._bids),
            "events": self._event_log.count if self._event_log is not None else 0,
            "persistence_degraded": self._persistence_degraded,
        }

    def export_state(self) -> MarketState:
        return MarketState(
            admin=self._access.admin,
            paused=self._pause.active,
            next_job_id=self._jobs.next_job_id,
            jobs=[job.copy() for job in self._jobs],
            bids=[bid.copy() for bid in self._bids],
            bid_counts=self._bids.counter.snapshot(),
            event_count=self._event_log.count if self._event_log is not None else 0,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _reject(
        self, op: str, code: ErrorCode, detail: Optional[str] = None,
    ) -> LifecycleResult:
        result = _fail(code, detail)
        logger.debug("%s rejected [%d]: %s", op, code.value, result.errors[0])
        return result

    def _gate(self, op: str, caller: str, job_id: int) -> Optional[LifecycleResult]:
        """Checks shared by every job-scoped mutation: pause, identity, id."""
        if self._pause.active:
            return self._reject(op, ErrorCode.PAUSED)
        if not caller:
            return self._reject(op, ErrorCode.INVALID_IDENTITY)
        if job_id <= 0:
            return self._reject(op, ErrorCode.INVALID_JOB_ID)
        return None

    def _lookup(self, job_id: int) -> tuple[Optional[Job], Optional[LifecycleResult]]:
        if job_id <= 0:
            return None, _fail(ErrorCode.INVALID_JOB_ID)
        job = self._jobs.get(job_id)
        if job is None:
            return None, _fail(ErrorCode.JOB_NOT_FOUND, f"Job not found: {job_id}")
        return job, None

    def _validate_details(
        self,
        op: str,
        now: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        budget: Optional[int] = None,
        deadlines: Optional[tuple[int, int]] = None,
    ) -> Optional[LifecycleResult]:
        """Field rules shared by create_job and edit_job, in check order.

        Only supplied fields are checked. deadlines is the resulting
        (deadline, bid_deadline) pair.
        """
        texts = [t for t in (title, description) if t is not None]
        if any(len(t) == 0 for t in texts):
            return self._reject(op, ErrorCode.INSUFFICIENT_DETAILS)
        if (title is not None and len(title) > self._config.max_title_length) or (
            description is not None
            and len(description) > self._config.max_description_length
        ):
            return self._reject(
                op, ErrorCode.INVALID_STRING_LENGTH,
                f"Title max {self._config.max_title_length}, "
                f"description max {self._config.max_description_length} characters",
            )
        if budget is not None and budget < self._config.min_bid_amount:
            return self._reject(
                op, ErrorCode.BUDGET_TOO_LOW,
                f"Budget {budget} below minimum {self._config.min_bid_amount}",
            )
        if deadlines is not None:
            deadline, bid_deadline = deadlines
            if deadline <= now or bid_deadline <= now or bid_deadline > deadline:
                return self._reject(
                    op, ErrorCode.DEADLINE_PASSED,
                    f"Require {now} < bid_deadline ({bid_deadline}) <= deadline ({deadline})",
                )
        return None

    @staticmethod
    def _apply(job: Job, target: JobStatus) -> None:
        errors = JobStateMachine.apply_transition(job, target)
        if errors:
            # Gate checks already matched the status; reaching here is a bug
            raise RuntimeError(errors[0])

    def _transition(
        self,
        job: Job,
        target: JobStatus,
        kind: EventKind,
        caller: str,
        hook: Optional[HookKind] = None,
    ) -> LifecycleResult:
        prior_status = job.status
        self._apply(job, target)

        def _rollback() -> None:
            job.status = prior_status

        self._commit(kind, caller, {"job_id": job.job_id, "status": target.value}, _rollback)
        logger.info(
            "Job %d %s → %s by %s",
            job.job_id, prior_status.value, target.value, caller,
        )
        if hook is not None:
            self._hooks.fire(hook, job)
        return _ok()

    def _next_event_id(self) -> str:
        self._event_counter += 1
        return f"EVT-{self._event_counter:08d}"

    def _commit(
        self,
        kind: EventKind,
        actor_id: str,
        payload: dict[str, Any],
        on_rollback: Callable[[], None],
    ) -> None:
        """Make the staged mutation durable.

        The audit append is the commit point: if it fails, on_rollback
        restores the pre-call state and CommitError is raised. A snapshot
        write that fails afterwards does not undo anything; the audit log
        already holds the operation, so the store is flagged as stale.
        Without an audit log the snapshot write is the commit point.
        """
        audited = False
        if self._event_log is not None:
            event_counter = self._event_counter
            try:
                event = EventRecord.create(
                    event_id=self._next_event_id(),
                    event_kind=kind,
                    actor_id=actor_id,
                    payload=payload,
                    block_height=self._clock.now(),
                )
                self._event_log.append(event)
            except (ValueError, OSError) as e:
                self._event_counter = event_counter
                on_rollback()
                raise CommitError(f"Event log failure: {e}") from e
            audited = True

        if self._state_store is not None:
            try:
                self._state_store.save(self.export_state())
            except OSError as e:
                if not audited:
                    on_rollback()
                    raise CommitError(f"Persistence failure: {e}") from e
                self._persistence_degraded = True
                logger.warning(
                    "Persistence degraded: %s — operation committed in audit log "
                    "but state store is stale", e,
                )
