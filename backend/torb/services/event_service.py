"""
Event service: availability views and administrator event management.

Availability is never stored. Every view is derived from the static sheet
layout plus the event's active (non-canceled) reservations:

  - one aggregation query counts active reservations per rank
    (reservations JOIN sheets GROUP BY rank)
  - per rank: price = event price + rank price, remains = total - reserved
  - the single-event view also lists every sheet with its reserved/mine flags
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from torb.models.event import Event
from torb.models.reservation import Reservation
from torb.models.sheet import Sheet
from torb.schemas.event import EventCreate, EventEdit, EventView, SheetsView, SheetView
from torb.services.sheets import LAYOUT, RANKS, TOTAL_SHEETS, iter_sheets
from torb.core.metrics import event_view_latency
from torb.core.logging import get_logger

logger = get_logger(__name__)


def to_unix(value: Optional[datetime]) -> Optional[int]:
    """Seconds since the epoch; naive datetimes (SQLite) are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def build_event_view(event: Event, reserved_by_rank: dict[str, int]) -> EventView:
    """Per-rank totals, remains and prices for an event, without sheet detail."""
    sheets = {}
    for rank in RANKS:
        layout = LAYOUT[rank]
        reserved = reserved_by_rank.get(rank, 0)
        sheets[rank] = SheetsView(
            total=layout.total,
            remains=layout.total - reserved,
            price=event.price + layout.price,
        )

    return EventView(
        id=event.id,
        title=event.title,
        public=event.public_fg,
        closed=event.closed_fg,
        price=event.price,
        total=TOTAL_SHEETS,
        remains=TOTAL_SHEETS - sum(reserved_by_rank.values()),
        sheets=sheets,
    )


def sanitize_event(view: EventView) -> EventView:
    """Copy of the view without the fields only administrators may see."""
    return view.model_copy(update={"price": None, "public": None, "closed": None})


def _reserved_counts_query():
    return (
        select(Reservation.event_id, Sheet.rank, func.count())
        .select_from(Reservation)
        .join(Sheet, Sheet.id == Reservation.sheet_id)
        .where(Reservation.canceled_at.is_(None))
        .group_by(Reservation.event_id, Sheet.rank)
    )


async def count_reserved_by_rank(db: AsyncSession, event_ids: list[int]) -> dict[int, dict[str, int]]:
    """Active reservation counts keyed by event id, then by rank."""
    counts: dict[int, dict[str, int]] = defaultdict(dict)
    if not event_ids:
        return counts

    result = await db.execute(
        _reserved_counts_query().where(Reservation.event_id.in_(event_ids))
    )
    for event_id, rank, count in result.all():
        counts[event_id][rank] = count
    return counts


async def get_events(db: AsyncSession, all: bool = False) -> list[EventView]:
    """
    List events in id order with per-rank availability and no sheet detail.
    Only public events unless `all` is set (administrator listing).
    """
    query = select(Event).order_by(Event.id.asc())
    if not all:
        query = query.where(Event.public_fg.is_(True))
    events = list((await db.execute(query)).scalars().all())

    counts = await count_reserved_by_rank(db, [event.id for event in events])
    return [build_event_view(event, counts.get(event.id, {})) for event in events]


async def get_event(
    db: AsyncSession,
    event_id: int,
    login_user_id: Optional[int] = None,
) -> EventView:
    """
    Full availability view of one event, including every sheet.

    A sheet is reserved when it has an active reservation; reserved_at is the
    earliest such reservation and `mine` is set when it belongs to
    login_user_id.
    """
    with event_view_latency.time():
        event = await db.get(Event, event_id)
        if not event:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="not_found",
            )

        counts = await count_reserved_by_rank(db, [event.id])
        view = build_event_view(event, counts.get(event.id, {}))

        result = await db.execute(
            select(Reservation.sheet_id, Reservation.user_id, Reservation.reserved_at)
            .where(
                Reservation.event_id == event.id,
                Reservation.canceled_at.is_(None),
            )
            .order_by(Reservation.reserved_at.asc(), Reservation.id.asc())
        )
        active = {}
        for sheet_id, user_id, reserved_at in result.all():
            active.setdefault(sheet_id, (user_id, reserved_at))

        for rank in RANKS:
            view.sheets[rank].detail = []
        for sheet in iter_sheets():
            detail = SheetView(num=sheet.num)
            if sheet.id in active:
                user_id, reserved_at = active[sheet.id]
                detail.reserved = True
                detail.reserved_at = to_unix(reserved_at)
                if login_user_id is not None and user_id == login_user_id:
                    detail.mine = True
            view.sheets[sheet.rank].detail.append(detail)

    return view


async def create_event(db: AsyncSession, event_data: EventCreate) -> EventView:
    """Create a new event. Events start open; visibility comes from the request."""
    event = Event(
        title=event_data.title,
        public_fg=event_data.public,
        closed_fg=False,
        price=event_data.price,
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, title=event.title, price=event.price)
    return await get_event(db, event.id)


async def edit_event(db: AsyncSession, event_id: int, edit_data: EventEdit) -> EventView:
    """
    Change an event's public/closed flags.
    Closing an event always unpublishes it; closed events are frozen.
    """
    public = edit_data.public
    closed = edit_data.closed
    if closed:
        public = False

    event = await db.get(Event, event_id)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="not_found",
        )

    if event.closed_fg:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="cannot_edit_closed_event",
        )
    if event.public_fg and closed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="cannot_close_public_event",
        )

    event.public_fg = public
    event.closed_fg = closed
    await db.flush()

    logger.info("event_edited", event_id=event.id, public=public, closed=closed)
    return await get_event(db, event.id)
