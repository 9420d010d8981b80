# app/ticket/tree.py
"""Parent assignment rules for the ticket tree.

The checks only read from the store; callers run them inside the same write
transaction that applies the assignment.
"""
from __future__ import annotations

from typing import Iterator

from app.ticket.errors import CycleDetectedError, NotFoundError, SelfParentError
from app.ticket.store import TicketStore


def ancestor_ids(store: TicketStore, ticket_id: int) -> Iterator[int]:
    """Yield ids from ``ticket_id`` up to its root, starting with ``ticket_id``.

    Raises ``CycleDetectedError`` if a ticket shows up twice, so the walk
    terminates even on a corrupted tree.
    """

    seen: set[int] = set()
    current: int | None = ticket_id
    while current is not None:
        if current in seen:
            raise CycleDetectedError(ticket_id, current)
        seen.add(current)
        yield current
        ticket = store.get(current)
        current = ticket.parent_id if ticket is not None else None


def validate_parent_assignment(store: TicketStore, child_id: int, parent_id: int | None) -> None:
    """Check that ``child_id`` may be moved under ``parent_id``.

    ``parent_id=None`` (detach to root) only requires the child to exist.
    """

    if not store.exists(child_id):
        raise NotFoundError(child_id)
    if parent_id is None:
        return
    if parent_id == child_id:
        raise SelfParentError(child_id)
    if not store.exists(parent_id):
        raise NotFoundError(parent_id)
    for ancestor in ancestor_ids(store, parent_id):
        if ancestor == child_id:
            raise CycleDetectedError(child_id, parent_id)
