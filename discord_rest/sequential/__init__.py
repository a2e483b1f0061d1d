"""
Ordering primitives used to serialize dispatches.
"""

from discord_rest.sequential.tickets import DispatchSequencer, Ticket, TicketState

__all__ = ["DispatchSequencer", "Ticket", "TicketState"]
