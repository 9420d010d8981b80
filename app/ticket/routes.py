# app/ticket/routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.ticket.domain import TicketNode
from app.ticket.schemas import (
    TicketChildrenAdd,
    TicketCompletedUpdate,
    TicketCreate,
    TicketOut,
    TicketParentSet,
    TicketTitleUpdate,
)
from app.ticket.store import TicketStore
from app.ticket import queries as ticket_queries
from app.ticket import services as ticket_service
router = APIRouter(prefix="/tickets", tags=["Tickets"])


def _to_response(node: TicketNode) -> TicketOut:
    return TicketOut.model_validate(node)


@router.get("", response_model=list[TicketOut])
def list_roots(db: Session = Depends(get_db)):
    return [_to_response(node) for node in ticket_queries.list_root_trees(db)]


@router.post("", response_model=TicketOut, status_code=201)
def create(ticket: TicketCreate, db: Session = Depends(get_db)):
    with TicketStore(db).write():
        created = ticket_service.create_ticket(db, ticket.title, ticket.is_completed)
        node = ticket_queries.get_tree(db, created.id)
    return _to_response(node)


@router.get("/{ticket_id}", response_model=TicketOut)
def get(ticket_id: int, db: Session = Depends(get_db)):
    return _to_response(ticket_queries.get_tree(db, ticket_id))


@router.get("/{ticket_id}/children", response_model=list[TicketOut])
def list_children(ticket_id: int, db: Session = Depends(get_db)):
    return [_to_response(node) for node in ticket_queries.list_child_trees(db, ticket_id)]


@router.put("/{ticket_id}", response_model=TicketOut)
def update(ticket_id: int, payload: TicketTitleUpdate, db: Session = Depends(get_db)):
    with TicketStore(db).write():
        ticket_service.update_title(db, ticket_id, payload.title)
        node = ticket_queries.get_tree(db, ticket_id)
    return _to_response(node)


@router.put("/{ticket_id}/completed", response_model=TicketOut)
def toggle(ticket_id: int, payload: TicketCompletedUpdate, db: Session = Depends(get_db)):
    with TicketStore(db).write():
        ticket_service.set_completed(db, ticket_id, payload.is_completed)
        node = ticket_queries.get_tree(db, ticket_id)
    return _to_response(node)


@router.delete("/{ticket_id}", response_model=bool)
def delete(ticket_id: int, db: Session = Depends(get_db)):
    return ticket_service.remove_ticket(db, ticket_id)


@router.post("/{parent_id}/children", response_model=TicketOut)
def add_children(parent_id: int, payload: TicketChildrenAdd, db: Session = Depends(get_db)):
    with TicketStore(db).write():
        parent = ticket_service.add_children(db, parent_id, payload.child_ids)
        node = ticket_queries.get_tree(db, parent.id)
    return _to_response(node)


@router.post("/{parent_id}/children/array", response_model=list[TicketOut])
def add_children_returning_array(parent_id: int, payload: TicketChildrenAdd, db: Session = Depends(get_db)):
    with TicketStore(db).write():
        children = ticket_service.add_children_returning_all(db, parent_id, payload.child_ids)
        nodes = ticket_queries.get_trees(db, [child.id for child in children])
    return [_to_response(node) for node in nodes]


@router.put("/{child_id}/parent", response_model=TicketOut)
def set_parent(child_id: int, payload: TicketParentSet, db: Session = Depends(get_db)):
    with TicketStore(db).write():
        ticket_service.set_parent(db, child_id, payload.parent_id)
        node = ticket_queries.get_tree(db, child_id)
    return _to_response(node)


@router.delete("/{ticket_id}/parent", response_model=TicketOut)
def remove_parent(ticket_id: int, db: Session = Depends(get_db)):
    with TicketStore(db).write():
        ticket_service.remove_parent(db, ticket_id)
        node = ticket_queries.get_tree(db, ticket_id)
    return _to_response(node)
