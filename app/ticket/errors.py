# app/ticket/errors.py
from __future__ import annotations


class TicketError(RuntimeError):
    """Base error for ticket tree operations."""

    kind = "ticket_error"
    status_code = 400

    def __init__(self, message: str, *, ticket_id: int | None = None) -> None:
        super().__init__(message)
        self.ticket_id = ticket_id

    def to_dict(self) -> dict:
        return {"detail": str(self), "kind": self.kind, "ticketId": self.ticket_id}


class NotFoundError(TicketError):
    """Raised when a referenced ticket does not exist."""

    kind = "not_found"
    status_code = 404

    def __init__(self, ticket_id: int) -> None:
        super().__init__("Ticket not found", ticket_id=ticket_id)


class TicketValidationError(TicketError):
    """Raised when input violates a ticket field rule."""

    kind = "validation_error"
    status_code = 422


class SelfParentError(TicketValidationError):
    """Raised when a ticket is proposed as its own parent."""

    kind = "self_parent"

    def __init__(self, ticket_id: int) -> None:
        super().__init__(f"Ticket {ticket_id} cannot be its own parent", ticket_id=ticket_id)


class CycleDetectedError(TicketError):
    """Raised when a parent assignment would make a ticket its own ancestor."""

    kind = "cycle_detected"
    status_code = 409

    def __init__(self, ticket_id: int, parent_id: int) -> None:
        super().__init__(
            f"Setting {parent_id} as parent of {ticket_id} would create a cycle",
            ticket_id=ticket_id,
        )
        self.parent_id = parent_id

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["parentId"] = self.parent_id
        return payload


class PartialFailureError(TicketError):
    """Raised when one member of a bulk reassignment is invalid.

    The whole batch is rejected; ``reason`` carries the error raised for the
    offending child.
    """

    kind = "partial_failure"
    status_code = 409

    def __init__(self, parent_id: int, offending_id: int, reason: TicketError) -> None:
        super().__init__(
            f"Cannot add ticket {offending_id} as child of {parent_id}: {reason}",
            ticket_id=parent_id,
        )
        self.offending_id = offending_id
        self.reason = reason

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["offendingId"] = self.offending_id
        payload["reason"] = self.reason.kind
        return payload


class StoreError(TicketError):
    """Raised when the underlying database fails or times out."""

    kind = "store_error"
    status_code = 503
