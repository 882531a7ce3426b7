"""
Sheet (seat) model. Rows mirror the static layout in torb.services.sheets.
"""

from sqlalchemy import Column, Integer, String, UniqueConstraint

from torb.db.base import Base


class Sheet(Base):
    __tablename__ = "sheets"

    id = Column(Integer, primary_key=True, autoincrement=False)
    rank = Column(String(128), nullable=False)
    num = Column(Integer, nullable=False)
    price = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("rank", "num", name="uq_sheet_rank_num"),
    )

    def __repr__(self) -> str:
        return f"<Sheet(id={self.id}, rank={self.rank}, num={self.num})>"
