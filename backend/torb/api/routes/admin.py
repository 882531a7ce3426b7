"""
Administrator event management. Views here are never sanitized.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from torb.db.session import get_db
from torb.schemas.event import EventCreate, EventEdit, EventView
from torb.services.event_service import create_event, edit_event, get_event, get_events
from torb.services.cache_service import invalidate_event_cache
from torb.core.security import admin_login_required, fillin_administrator

router = APIRouter(
    prefix="/admin/api/events",
    tags=["Admin"],
    dependencies=[Depends(fillin_administrator), Depends(admin_login_required)],
)


@router.get("", response_model=list[EventView], response_model_exclude_none=True)
async def list_all_events(db: AsyncSession = Depends(get_db)):
    """Every event, public or not, without sheet detail."""
    return await get_events(db, all=True)


@router.post("", response_model=EventView, response_model_exclude_none=True)
async def create_event_endpoint(event_data: EventCreate, db: AsyncSession = Depends(get_db)):
    event = await create_event(db, event_data)
    await db.commit()
    await invalidate_event_cache()
    return event


@router.get("/{event_id}", response_model=EventView, response_model_exclude_none=True)
async def show_event(event_id: int, db: AsyncSession = Depends(get_db)):
    return await get_event(db, event_id)


@router.post("/{event_id}/actions/edit", response_model=EventView, response_model_exclude_none=True)
async def edit_event_endpoint(
    event_id: int,
    edit_data: EventEdit,
    db: AsyncSession = Depends(get_db),
):
    """Publish, unpublish or close an event. Closing also unpublishes."""
    event = await edit_event(db, event_id, edit_data)
    await db.commit()
    await invalidate_event_cache()
    return event
