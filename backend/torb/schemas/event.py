"""
Pydantic schemas for events and their per-rank sheet availability.

Public endpoints return sanitized views where price, public and closed are
left as None and dropped from the response (routes use
response_model_exclude_none). The same applies to the per-sheet flags, which
are only present when set.
"""

from typing import Optional
from pydantic import BaseModel, Field


class SheetView(BaseModel):
    num: int
    mine: Optional[bool] = None
    reserved: Optional[bool] = None
    reserved_at: Optional[int] = None


class SheetsView(BaseModel):
    total: int = 0
    remains: int = 0
    price: int = 0
    detail: Optional[list[SheetView]] = None


class EventView(BaseModel):
    id: int
    title: str
    public: Optional[bool] = None
    closed: Optional[bool] = None
    price: Optional[int] = None
    total: int = 0
    remains: int = 0
    sheets: Optional[dict[str, SheetsView]] = None


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=128)
    public: bool = False
    price: int = Field(..., ge=0)


class EventEdit(BaseModel):
    public: bool = False
    closed: bool = False
