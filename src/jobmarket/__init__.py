"""jobmarket — a ledger-ordered freelance job marketplace."""

__version__ = "0.1.0"
