from torb.models.user import User, Administrator
from torb.models.event import Event
from torb.models.sheet import Sheet
from torb.models.reservation import Reservation

__all__ = ["User", "Administrator", "Event", "Sheet", "Reservation"]
