"""
Reservation service: reserving and canceling sheets, and user history.

CONCURRENCY
===========

Two users must never hold the same sheet of the same event. Both write paths
start by locking the event row (SELECT ... FOR UPDATE), which serializes
reservations and cancellations per event while leaving other events
untouched. Inside that lock a random free sheet of the requested rank is
chosen with a NOT IN subquery over the event's active reservations.

SQLite ignores FOR UPDATE, but it also serializes writers, so the same code
is safe in tests.
"""

from datetime import datetime, timezone
from typing import Union

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from torb.models.event import Event
from torb.models.reservation import Reservation
from torb.models.sheet import Sheet
from torb.models.user import User
from torb.schemas.reservation import ReservationCreated, RecentReservation, UserSummary
from torb.services.event_service import build_event_view, count_reserved_by_rank, to_unix
from torb.services.sheets import LAYOUT, get_sheet_info, validate_rank
from torb.core.metrics import record_cancellation, record_reservation_attempt
from torb.core.logging import get_logger

logger = get_logger(__name__)

RECENT_LIMIT = 5


async def _lock_reservable_event(db: AsyncSession, event_id: int) -> Event:
    result = await db.execute(
        select(Event).where(Event.id == event_id).with_for_update()
    )
    event = result.scalar_one_or_none()
    if not event or not event.public_fg or event.closed_fg:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="invalid_event",
        )
    return event


async def reserve_sheet(
    db: AsyncSession,
    event_id: int,
    rank: str,
    user_id: int,
) -> ReservationCreated:
    """Reserve a random free sheet of `rank` for the user."""
    event = await _lock_reservable_event(db, event_id)

    if not validate_rank(rank):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="invalid_rank",
        )

    active_sheet_ids = select(Reservation.sheet_id).where(
        Reservation.event_id == event.id,
        Reservation.canceled_at.is_(None),
    )
    result = await db.execute(
        select(Sheet)
        .where(Sheet.rank == rank, Sheet.id.not_in(active_sheet_ids))
        .order_by(func.random())
        .limit(1)
    )
    sheet = result.scalar_one_or_none()
    if not sheet:
        record_reservation_attempt("sold_out")
        logger.warning("reservation_sold_out", event_id=event.id, rank=rank, user_id=user_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="sold_out",
        )

    reservation = Reservation(
        event_id=event.id,
        sheet_id=sheet.id,
        user_id=user_id,
        reserved_at=datetime.now(timezone.utc),
    )
    db.add(reservation)
    try:
        await db.flush()
    except SQLAlchemyError:
        record_reservation_attempt("error")
        logger.exception("reservation_failed", event_id=event.id, sheet_id=sheet.id, user_id=user_id)
        raise

    record_reservation_attempt("success")
    logger.info(
        "reservation_created",
        reservation_id=reservation.id,
        event_id=event.id,
        user_id=user_id,
        rank=sheet.rank,
        num=sheet.num,
    )
    return ReservationCreated(id=reservation.id, sheet_rank=sheet.rank, sheet_num=sheet.num)


async def cancel_reservation(
    db: AsyncSession,
    event_id: int,
    rank: str,
    num: Union[int, str],
    user_id: int,
) -> Reservation:
    """Cancel the user's active reservation of one sheet."""
    event = await _lock_reservable_event(db, event_id)

    if not validate_rank(rank):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="invalid_rank",
        )

    sheet = get_sheet_info(rank, num)
    if not sheet:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="invalid_sheet",
        )

    result = await db.execute(
        select(Reservation)
        .where(
            Reservation.event_id == event.id,
            Reservation.sheet_id == sheet.id,
            Reservation.canceled_at.is_(None),
        )
        .order_by(Reservation.reserved_at.asc(), Reservation.id.asc())
        .limit(1)
        .with_for_update()
    )
    reservation = result.scalar_one_or_none()
    if not reservation:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="not_reserved",
        )
    if reservation.user_id != user_id:
        logger.warning(
            "cancel_not_permitted",
            reservation_id=reservation.id,
            owner_id=reservation.user_id,
            user_id=user_id,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="not_permitted",
        )

    reservation.canceled_at = datetime.now(timezone.utc)
    await db.flush()

    record_cancellation()
    logger.info(
        "reservation_canceled",
        reservation_id=reservation.id,
        event_id=event.id,
        user_id=user_id,
        rank=sheet.rank,
        num=sheet.num,
    )
    return reservation


async def get_user_summary(db: AsyncSession, user: User) -> UserSummary:
    """
    The user's page: latest reservations (canceled ones included), the total
    price of active reservations, and the events most recently reserved.
    """
    last_update = func.coalesce(Reservation.canceled_at, Reservation.reserved_at)

    result = await db.execute(
        select(Reservation, Sheet.rank, Sheet.num)
        .join(Sheet, Sheet.id == Reservation.sheet_id)
        .where(Reservation.user_id == user.id)
        .order_by(last_update.desc(), Reservation.id.desc())
        .limit(RECENT_LIMIT)
    )
    recent_rows = result.all()

    result = await db.execute(
        select(Reservation.event_id)
        .where(Reservation.user_id == user.id)
        .group_by(Reservation.event_id)
        .order_by(func.max(last_update).desc(), Reservation.event_id.desc())
        .limit(RECENT_LIMIT)
    )
    recent_event_ids = list(result.scalars().all())

    total_price = (await db.execute(
        select(func.coalesce(func.sum(Event.price + Sheet.price), 0))
        .select_from(Reservation)
        .join(Sheet, Sheet.id == Reservation.sheet_id)
        .join(Event, Event.id == Reservation.event_id)
        .where(Reservation.user_id == user.id, Reservation.canceled_at.is_(None))
    )).scalar()

    event_ids = {row.Reservation.event_id for row in recent_rows} | set(recent_event_ids)
    events = {}
    if event_ids:
        result = await db.execute(select(Event).where(Event.id.in_(event_ids)))
        events = {event.id: event for event in result.scalars().all()}
    counts = await count_reserved_by_rank(db, list(events))
    views = {
        event_id: build_event_view(event, counts.get(event_id, {}))
        for event_id, event in events.items()
    }

    recent_reservations = []
    for reservation, rank, num in recent_rows:
        view = views[reservation.event_id]
        recent_reservations.append(RecentReservation(
            id=reservation.id,
            event=view.model_copy(update={"sheets": None, "total": 0, "remains": 0}),
            sheet_rank=rank,
            sheet_num=num,
            price=view.price + LAYOUT[rank].price,
            reserved_at=to_unix(reservation.reserved_at),
            canceled_at=to_unix(reservation.canceled_at),
        ))

    return UserSummary(
        id=user.id,
        nickname=user.nickname,
        recent_reservations=recent_reservations,
        total_price=int(total_price or 0),
        recent_events=[views[event_id] for event_id in recent_event_ids],
    )
