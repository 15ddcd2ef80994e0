"""
Stale-result guard for overlapping fetches.

The core never cancels a request. When the filter changes while a fetch is
in flight, both fetches finish; a consumer must drop the older one even if
it lands last. ``LatestResultGate`` hands out increasing tickets and only
lets the newest ticket's result through.

Usage::

    gate = LatestResultGate()

    async def on_filter_change(criteria):
        result = await gate.run(client.fetch_notable_observations(criteria.region_code, criteria))
        if result is not None:
            render(result)
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class LatestResultGate:
    """Tracks the most recently started request and rejects older ones."""

    def __init__(self) -> None:
        self._issued = 0
        self._applied = 0

    @property
    def latest_ticket(self) -> int:
        return self._issued

    @property
    def applied_ticket(self) -> int:
        """Ticket of the last result let through (0 if none yet)."""
        return self._applied

    def issue(self) -> int:
        """Start a request; its ticket supersedes every earlier one."""
        self._issued += 1
        return self._issued

    def is_current(self, ticket: int) -> bool:
        return ticket == self._issued

    def accept(self, ticket: int) -> bool:
        """Mark ``ticket``'s result as applied if it is still the newest."""
        if not self.is_current(ticket):
            return False
        self._applied = ticket
        return True

    async def run(self, request: Awaitable[T]) -> T | None:
        """
        Await ``request`` under a fresh ticket.

        Returns the result, or None if a newer request was started while
        this one was pending.
        """
        ticket = self.issue()
        result = await request
        return result if self.accept(ticket) else None
