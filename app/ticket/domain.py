# app/ticket/domain.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Ticket:
    """Detached snapshot of a stored ticket.

    ``parent_id is None`` means the ticket is a root. Absence of a ticket is
    never encoded in this value; lookups raise ``NotFoundError`` instead.
    """

    id: int
    title: str
    is_completed: bool
    parent_id: int | None


@dataclass(frozen=True, slots=True)
class TicketNode:
    """A ticket together with its resolved subtree."""

    ticket: Ticket
    children: tuple[TicketNode, ...] = field(default_factory=tuple)

    @property
    def id(self) -> int:
        return self.ticket.id

    @property
    def title(self) -> str:
        return self.ticket.title

    @property
    def is_completed(self) -> bool:
        return self.ticket.is_completed

    @property
    def parent_id(self) -> int | None:
        return self.ticket.parent_id
