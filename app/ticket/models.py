# app/ticket/models.py
from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from app.core.database import Base

class TicketRecord(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    parent_id = Column(
        Integer,
        ForeignKey("tickets.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
