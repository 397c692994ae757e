"""Job marketplace core — stores, access control, and the lifecycle.

Clients post jobs, freelancers bid, the client accepts a bid, and the
assigned worker carries the job through to completion or dispute. Every
operation is applied through JobLifecycle.
"""

from jobmarket.market.access import AccessControl
from jobmarket.market.bid_store import BidCounter, BidStore
from jobmarket.market.clock import LogicalClock
from jobmarket.market.hooks import HookKind, LifecycleHooks
from jobmarket.market.invariants import check_invariants
from jobmarket.market.job_store import JobStore
from jobmarket.market.lifecycle import JobLifecycle, LifecycleResult
from jobmarket.market.pause import PauseSwitch
from jobmarket.market.status import JobStateMachine, derive_status

__all__ = [
    "AccessControl",
    "BidCounter",
    "BidStore",
    "HookKind",
    "JobLifecycle",
    "JobStateMachine",
    "JobStore",
    "LifecycleHooks",
    "LifecycleResult",
    "LogicalClock",
    "PauseSwitch",
    "check_invariants",
    "derive_status",
]
