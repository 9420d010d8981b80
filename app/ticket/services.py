# app/ticket/services.py
import logging
from typing import Iterable

from sqlalchemy.orm import Session
from app.ticket.domain import Ticket
from app.ticket.errors import NotFoundError, PartialFailureError, TicketError, TicketValidationError
from app.ticket.store import TicketStore
from app.ticket.tree import validate_parent_assignment

logger = logging.getLogger(__name__)


def _clean_title(title: str) -> str:
    if title is None or not title.strip():
        raise TicketValidationError("Title must not be empty")
    return title


def create_ticket(db: Session, title: str, is_completed: bool | None = False) -> Ticket:
    title = _clean_title(title)
    with TicketStore(db).write() as store:
        ticket = store.create(title=title, is_completed=bool(is_completed))
    logger.info("Created ticket %s", ticket.id)
    return ticket


def update_title(db: Session, ticket_id: int, title: str) -> Ticket:
    title = _clean_title(title)
    with TicketStore(db).write() as store:
        ticket = store.update(ticket_id, title=title)
    if ticket is None:
        raise NotFoundError(ticket_id)
    return ticket


def set_completed(db: Session, ticket_id: int, is_completed: bool) -> Ticket:
    with TicketStore(db).write() as store:
        ticket = store.update(ticket_id, is_completed=is_completed)
    if ticket is None:
        raise NotFoundError(ticket_id)
    return ticket


def remove_ticket(db: Session, ticket_id: int) -> bool:
    """Delete a ticket, promoting its children to roots.

    Returns False when the ticket does not exist.
    """
    with TicketStore(db).write() as store:
        if not store.exists(ticket_id):
            return False
        orphaned = store.orphan_children(ticket_id)
        store.delete(ticket_id)
    if orphaned:
        logger.info("Deleted ticket %s, orphaned children %s", ticket_id, orphaned)
    else:
        logger.info("Deleted ticket %s", ticket_id)
    return True


def set_parent(db: Session, child_id: int, parent_id: int | None) -> Ticket:
    try:
        with TicketStore(db).write() as store:
            validate_parent_assignment(store, child_id, parent_id)
            (ticket,) = store.reparent([child_id], parent_id)
    except TicketError as exc:
        logger.warning("Rejected parent %s for ticket %s: %s", parent_id, child_id, exc)
        raise
    logger.info("Moved ticket %s under %s", child_id, parent_id)
    return ticket


def remove_parent(db: Session, ticket_id: int) -> Ticket:
    with TicketStore(db).write() as store:
        updated = store.reparent([ticket_id], None)
    if not updated:
        raise NotFoundError(ticket_id)
    return updated[0]


def add_children(db: Session, parent_id: int, child_ids: Iterable[int]) -> Ticket:
    """Move every child under ``parent_id`` and return the parent."""
    parent, _ = _add_children(db, parent_id, child_ids)
    return parent


def add_children_returning_all(db: Session, parent_id: int, child_ids: Iterable[int]) -> list[Ticket]:
    """Move every child under ``parent_id`` and return the moved children."""
    _, children = _add_children(db, parent_id, child_ids)
    return children


def _add_children(db: Session, parent_id: int, child_ids: Iterable[int]) -> tuple[Ticket, list[Ticket]]:
    # All children move to the same parent, so checking each against the
    # current tree is enough: a cycle needs some child on the parent's chain.
    unique_ids = list(dict.fromkeys(child_ids))
    with TicketStore(db).write() as store:
        parent = store.get(parent_id)
        if parent is None:
            raise NotFoundError(parent_id)
        for child_id in unique_ids:
            try:
                validate_parent_assignment(store, child_id, parent_id)
            except TicketError as exc:
                logger.warning("Rejected children %s for ticket %s: %s", unique_ids, parent_id, exc)
                raise PartialFailureError(parent_id, child_id, exc) from exc
        children = store.reparent(unique_ids, parent_id)
    logger.info("Added children %s to ticket %s", unique_ids, parent_id)
    return parent, children
