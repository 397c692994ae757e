"""Pause switch — administrator-controlled gate on every mutation."""

from __future__ import annotations


class PauseSwitch:
    """Process-wide boolean gate.

    Authorisation is checked by the lifecycle (only the administrator
    may flip it); this class only holds the flag.
    """

    def __init__(self, paused: bool = False) -> None:
        self._paused = paused

    @property
    def active(self) -> bool:
        return self._paused

    def set(self, value: bool) -> bool:
        self._paused = bool(value)
        return self._paused
