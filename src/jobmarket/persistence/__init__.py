"""Persistence — audit event log and state snapshots."""

from jobmarket.persistence.event_log import EventKind, EventLog, EventRecord
from jobmarket.persistence.state_store import MarketState, StateStore

__all__ = ["EventKind", "EventLog", "EventRecord", "MarketState", "StateStore"]
