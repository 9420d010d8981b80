# app/ticket/queries.py
from sqlalchemy.orm import Session

from app.ticket.domain import Ticket, TicketNode
from app.ticket.errors import NotFoundError
from app.ticket.store import TicketStore


def list_roots(db: Session) -> list[Ticket]:
    with TicketStore(db).read() as store:
        return store.scan_roots()


def get_by_id(db: Session, ticket_id: int) -> Ticket:
    with TicketStore(db).read() as store:
        ticket = store.get(ticket_id)
    if ticket is None:
        raise NotFoundError(ticket_id)
    return ticket


def get_children(db: Session, ticket_id: int) -> list[Ticket]:
    with TicketStore(db).read() as store:
        return store.scan_children(ticket_id)


def get_tree(db: Session, ticket_id: int) -> TicketNode:
    """Resolve a ticket and its whole subtree from one snapshot."""
    with TicketStore(db).read() as store:
        ticket = store.get(ticket_id)
        if ticket is None:
            raise NotFoundError(ticket_id)
        return _build_node(store, ticket)


def get_trees(db: Session, ticket_ids: list[int]) -> list[TicketNode]:
    with TicketStore(db).read() as store:
        nodes = []
        for ticket_id in ticket_ids:
            ticket = store.get(ticket_id)
            if ticket is None:
                raise NotFoundError(ticket_id)
            nodes.append(_build_node(store, ticket))
        return nodes


def list_root_trees(db: Session) -> list[TicketNode]:
    with TicketStore(db).read() as store:
        return [_build_node(store, ticket) for ticket in store.scan_roots()]


def list_child_trees(db: Session, ticket_id: int) -> list[TicketNode]:
    with TicketStore(db).read() as store:
        return [_build_node(store, ticket) for ticket in store.scan_children(ticket_id)]


def _build_node(store: TicketStore, ticket: Ticket) -> TicketNode:
    # Terminates because mutations keep the parent graph acyclic.
    children = tuple(_build_node(store, child) for child in store.scan_children(ticket.id))
    return TicketNode(ticket=ticket, children=children)
