"""Logical clock supplied by the host ledger.

The marketplace never reads wall-clock time. Every deadline comparison
uses the block height the host reports for the operation being applied.
The host advances the clock between operations; it never moves
backwards.
"""

from __future__ import annotations


class LogicalClock:
    """Monotonically non-decreasing block-height counter."""

    def __init__(self, height: int = 0) -> None:
        if height < 0:
            raise ValueError(f"Clock height must be >= 0, got {height}")
        self._height = height

    def now(self) -> int:
        return self._height

    def advance_to(self, height: int) -> int:
        """Move the clock forward. Raises ValueError if height goes backwards."""
        if height < self._height:
            raise ValueError(
                f"Logical clock cannot move backwards: {self._height} → {height}"
            )
        self._height = height
        return self._height

    def tick(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError(f"Cannot tick by a negative amount: {blocks}")
        return self.advance_to(self._height + blocks)
