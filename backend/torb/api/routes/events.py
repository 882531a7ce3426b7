"""
Public event endpoints: availability and seat reservation.

The list is cached in Redis (see cache_service); single-event views carry
per-user flags and always hit the database.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from torb.db.session import get_db
from torb.models.user import User
from torb.schemas.event import EventView
from torb.schemas.reservation import ReservationCreated, ReserveRequest
from torb.services.event_service import get_event, get_events, sanitize_event
from torb.services.reservation_service import cancel_reservation, reserve_sheet
from torb.services.cache_service import get_cached_events, invalidate_event_cache, set_cached_events
from torb.core.security import fillin_user, login_required
from torb.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/api/events", tags=["Events"], dependencies=[Depends(fillin_user)])


@router.get("", response_model=list[EventView], response_model_exclude_none=True)
async def list_events(db: AsyncSession = Depends(get_db)):
    """Public events with per-rank availability, sanitized."""
    cached = await get_cached_events()
    if cached is not None:
        logger.info("events_list_cache_hit")
        return cached

    events = [
        sanitize_event(event).model_dump(exclude_none=True)
        for event in await get_events(db)
    ]
    await set_cached_events(events)
    return events


@router.get("/{event_id}", response_model=EventView, response_model_exclude_none=True)
async def show_event(
    event_id: int,
    user: Optional[User] = Depends(fillin_user),
    db: AsyncSession = Depends(get_db),
):
    """One public event with every sheet; `mine` marks the caller's sheets."""
    event = await get_event(db, event_id, user.id if user else None)
    if not event.public:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="not_found",
        )
    return sanitize_event(event)


@router.post(
    "/{event_id}/actions/reserve",
    response_model=ReservationCreated,
    status_code=status.HTTP_202_ACCEPTED,
)
async def reserve(
    event_id: int,
    reserve_data: ReserveRequest,
    user: User = Depends(login_required),
    db: AsyncSession = Depends(get_db),
):
    """Reserve a random free sheet of the requested rank."""
    reservation = await reserve_sheet(db, event_id, reserve_data.sheet_rank, user.id)
    await db.commit()
    await invalidate_event_cache()
    return reservation


@router.delete(
    "/{event_id}/sheets/{rank}/{num}/reservation",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def cancel(
    event_id: int,
    rank: str,
    num: str,
    user: User = Depends(login_required),
    db: AsyncSession = Depends(get_db),
):
    """Cancel the caller's reservation of one sheet."""
    await cancel_reservation(db, event_id, rank, num, user.id)
    await db.commit()
    await invalidate_event_cache()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
