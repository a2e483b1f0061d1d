"""
FIFO ticket queue that lets exactly one dispatch run at a time, in call order.
"""

from __future__ import annotations

import asyncio
import enum
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator


class TicketState(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    RELEASED = "released"


@dataclass(slots=True, eq=False)
class Ticket:
    """One caller's place in line.

    ``done`` is resolved exactly once, when the owner calls
    :meth:`DispatchSequencer.leave`; the caller queued right behind it waits on it.
    """

    done: asyncio.Future[None]
    state: TicketState = field(default=TicketState.PENDING)

    def release(self) -> None:
        self.state = TicketState.RELEASED
        if not self.done.done():
            self.done.set_result(None)


class DispatchSequencer:
    """Async mutex with strict FIFO admission built from chained tickets.

    Each new ticket waits on the completion of the ticket queued just before
    it, so nobody can overtake a caller that entered earlier. A caller
    cancelled while queued gives up its slot once its predecessor leaves.
    A caller that is admitted but never leaves blocks everyone behind it, so
    callers should prefer :meth:`turn`, which always releases.
    """

    def __init__(self) -> None:
        self._tickets: deque[Ticket] = deque()

    @property
    def remaining(self) -> bool:
        """Whether any ticket is still outstanding."""
        return len(self._tickets) > 0

    def __len__(self) -> int:
        return len(self._tickets)

    async def enter(self) -> Ticket:
        loop = asyncio.get_running_loop()
        if self._tickets:
            wait_for: asyncio.Future[None] = self._tickets[-1].done
        else:
            wait_for = loop.create_future()
            wait_for.set_result(None)

        # Queued before the first suspension point, so queue order is call order.
        ticket = Ticket(done=loop.create_future())
        self._tickets.append(ticket)

        try:
            await asyncio.shield(wait_for)
        except asyncio.CancelledError:
            # The slot is handed on only once everyone ahead of it has left.
            if wait_for.done():
                self._abandon(ticket)
            else:
                wait_for.add_done_callback(lambda _: self._abandon(ticket))
            raise

        ticket.state = TicketState.ACTIVE
        return ticket

    def _abandon(self, ticket: Ticket) -> None:
        if ticket in self._tickets:
            self._tickets.remove(ticket)
        ticket.release()

    def leave(self) -> None:
        if not self._tickets:
            return
        self._tickets.popleft().release()

    @asynccontextmanager
    async def turn(self) -> AsyncIterator[Ticket]:
        """Hold a ticket for the duration of the block."""
        ticket = await self.enter()
        try:
            yield ticket
        finally:
            self.leave()
