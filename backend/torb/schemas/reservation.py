"""
Pydantic schemas for reservation requests and user reservation history.
"""

from typing import Optional
from pydantic import BaseModel

from torb.schemas.event import EventView


class ReserveRequest(BaseModel):
    # Missing or unknown ranks are reported as invalid_rank, not 422
    sheet_rank: str = ""


class ReservationCreated(BaseModel):
    id: int
    sheet_rank: str
    sheet_num: int


class RecentReservation(BaseModel):
    id: int
    event: EventView
    sheet_rank: str
    sheet_num: int
    price: int
    reserved_at: int
    canceled_at: Optional[int] = None


class UserSummary(BaseModel):
    id: int
    nickname: str
    recent_reservations: list[RecentReservation]
    total_price: int
    recent_events: list[EventView]
