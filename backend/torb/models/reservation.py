"""
Reservation model.

A reservation is active while canceled_at is NULL. Canceled rows are kept so
users can see their history.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer

from torb.db.base import Base


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    sheet_id = Column(Integer, ForeignKey("sheets.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    reserved_at = Column(DateTime(timezone=True), nullable=False)
    canceled_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        # Availability queries filter on event and sheet together
        Index("ix_reservations_event_sheet", "event_id", "sheet_id"),
        Index("ix_reservations_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Reservation(id={self.id}, event={self.event_id}, sheet={self.sheet_id}, user={self.user_id})>"
