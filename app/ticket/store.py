# app/ticket/store.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from app.core.database import WRITE_LOCK_OPTION
from app.ticket.domain import Ticket
from app.ticket.errors import StoreError
from app.ticket.models import TicketRecord

logger = logging.getLogger(__name__)


class TicketStore:
    """Keyed storage for ticket rows.

    Every read and write goes through ``read()`` or ``write()``, each of which
    wraps exactly one database transaction. Opened while the session is
    already in one, they join it through a savepoint, so a caller can run a
    mutation and the read of its result as one unit. Rows never leave the
    store; callers get detached ``Ticket`` values.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    @contextmanager
    def read(self) -> Iterator[TicketStore]:
        with self._transaction(write=False):
            yield self

    @contextmanager
    def write(self) -> Iterator[TicketStore]:
        with self._transaction(write=True):
            yield self

    @contextmanager
    def _transaction(self, *, write: bool) -> Iterator[None]:
        # Inside an open transaction, nest as a savepoint of the outer one.
        if self._db.in_transaction():
            with self._db.begin_nested():
                yield
            return
        try:
            with self._db.begin():
                if write:
                    # Must be the first statement so BEGIN takes the write lock.
                    self._db.connection(execution_options={WRITE_LOCK_OPTION: True})
                yield
        except DBAPIError as exc:
            logger.exception("Ticket store transaction failed")
            raise StoreError("Ticket store unavailable") from exc

    # point lookup

    def get(self, ticket_id: int) -> Ticket | None:
        record = self._record(ticket_id)
        return None if record is None else _to_ticket(record)

    def exists(self, ticket_id: int) -> bool:
        return self._record(ticket_id) is not None

    # predicate scans

    def scan_roots(self) -> list[Ticket]:
        records = (
            self._db.query(TicketRecord)
            .filter(TicketRecord.parent_id.is_(None))
            .order_by(TicketRecord.id)
            .all()
        )
        return [_to_ticket(record) for record in records]

    def scan_children(self, parent_id: int) -> list[Ticket]:
        records = (
            self._db.query(TicketRecord)
            .filter(TicketRecord.parent_id == parent_id)
            .order_by(TicketRecord.id)
            .all()
        )
        return [_to_ticket(record) for record in records]

    # writes

    def create(self, *, title: str, is_completed: bool = False) -> Ticket:
        record = TicketRecord(title=title, is_completed=is_completed, parent_id=None)
        self._db.add(record)
        self._db.flush()
        return _to_ticket(record)

    def update(self, ticket_id: int, **fields: Any) -> Ticket | None:
        record = self._record(ticket_id)
        if record is None:
            return None
        for name, value in fields.items():
            setattr(record, name, value)
        self._db.flush()
        return _to_ticket(record)

    def reparent(self, ticket_ids: Iterable[int], parent_id: int | None) -> list[Ticket]:
        """Point every id at ``parent_id``. Missing ids are skipped."""

        updated = []
        for ticket_id in ticket_ids:
            record = self._record(ticket_id)
            if record is None:
                continue
            record.parent_id = parent_id
            updated.append(record)
        self._db.flush()
        return [_to_ticket(record) for record in updated]

    def orphan_children(self, parent_id: int) -> list[int]:
        records = self._db.query(TicketRecord).filter(TicketRecord.parent_id == parent_id).all()
        for record in records:
            record.parent_id = None
        self._db.flush()
        return [record.id for record in records]

    def delete(self, ticket_id: int) -> bool:
        record = self._record(ticket_id)
        if record is None:
            return False
        self._db.delete(record)
        self._db.flush()
        return True

    def _record(self, ticket_id: int) -> TicketRecord | None:
        return self._db.query(TicketRecord).filter(TicketRecord.id == ticket_id).first()


def _to_ticket(record: TicketRecord) -> Ticket:
    return Ticket(
        id=record.id,
        title=record.title,
        is_completed=bool(record.is_completed),
        parent_id=record.parent_id,
    )
