"""
Event model.

Every event is sold over the same fixed sheet layout, so the row only holds
the base price that is added to each rank's price.
"""

from sqlalchemy import Boolean, Column, Integer, String

from torb.db.base import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(128), nullable=False)
    public_fg = Column(Boolean, nullable=False, default=False)
    closed_fg = Column(Boolean, nullable=False, default=False)
    price = Column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, public={self.public_fg}, closed={self.closed_fg})>"
