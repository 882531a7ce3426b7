from torb.schemas.user import UserCreate, LoginRequest, UserResponse, AdministratorResponse
from torb.schemas.event import SheetView, SheetsView, EventView, EventCreate, EventEdit
from torb.schemas.reservation import (
    ReserveRequest, ReservationCreated, RecentReservation, UserSummary,
)

__all__ = [
    "UserCreate", "LoginRequest", "UserResponse", "AdministratorResponse",
    "SheetView", "SheetsView", "EventView", "EventCreate", "EventEdit",
    "ReserveRequest", "ReservationCreated", "RecentReservation", "UserSummary",
]
