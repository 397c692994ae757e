"""Error taxonomy for the job marketplace.

Rejections are returned to callers as values carrying a stable numeric
code, never raised. Integrators match on the code, so the numbers below
must not change.

Only infrastructure failures raise: if the audit log or state store
cannot be written, the in-memory state is rolled back and CommitError
is raised to the host.
"""

from __future__ import annotations

import enum


class ErrorCode(enum.IntEnum):
    """Stable error codes returned by marketplace operations."""
    NOT_AUTHORIZED = 100
    INSUFFICIENT_DETAILS = 101
    JOB_NOT_FOUND = 102
    INVALID_STATUS = 103
    PAUSED = 104
    INVALID_IDENTITY = 105
    INVALID_BID_AMOUNT = 106
    BID_ALREADY_EXISTS = 107
    NOT_CLIENT = 108
    JOB_NOT_OPEN = 109
    BUDGET_TOO_LOW = 110
    DEADLINE_PASSED = 111
    EDIT_NOT_ALLOWED = 112
    CANCEL_NOT_ALLOWED = 113
    INVALID_JOB_ID = 114
    INVALID_STRING_LENGTH = 115
    INVALID_TIME = 116


DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.NOT_AUTHORIZED: "Caller is not authorized for this action",
    ErrorCode.INSUFFICIENT_DETAILS: "Required text field is empty",
    ErrorCode.JOB_NOT_FOUND: "Job or bid not found",
    ErrorCode.INVALID_STATUS: "Operation not valid for the job's current status",
    ErrorCode.PAUSED: "Marketplace is paused",
    ErrorCode.INVALID_IDENTITY: "Blank identity supplied",
    ErrorCode.INVALID_BID_AMOUNT: "Bid amount outside the allowed range",
    ErrorCode.BID_ALREADY_EXISTS: "Bidder already has a live bid on this job",
    ErrorCode.NOT_CLIENT: "Caller is not the job's client",
    ErrorCode.JOB_NOT_OPEN: "Job is not open for bidding",
    ErrorCode.BUDGET_TOO_LOW: "Budget below the minimum",
    ErrorCode.DEADLINE_PASSED: "Deadline passed or invalid",
    ErrorCode.EDIT_NOT_ALLOWED: "Job can only be edited while open",
    ErrorCode.CANCEL_NOT_ALLOWED: "Job can only be cancelled while open or bidding",
    ErrorCode.INVALID_JOB_ID: "Job identifier must be positive",
    ErrorCode.INVALID_STRING_LENGTH: "Text field exceeds maximum length",
    ErrorCode.INVALID_TIME: "Time value must be positive",
}


class CommitError(RuntimeError):
    """Raised when an applied operation could not be made durable.

    The lifecycle has already restored its pre-call state when this is
    raised.
    """
