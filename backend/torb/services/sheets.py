"""
Static sheet layout shared by every event.

The venue has 1000 sheets split into four ranks. IDs are assigned
contiguously rank by rank, so converting between (rank, num) and the global
sheet ID is plain offset arithmetic and never needs the database:

    S:   1 -   50  (50 sheets, +5000)
    A:  51 -  200  (150 sheets, +3000)
    B: 201 -  500  (300 sheets, +1000)
    C: 501 - 1000  (500 sheets, +0)
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class RankLayout:
    rank: str
    total: int
    offset: int
    price: int


@dataclass(frozen=True)
class SheetInfo:
    id: int
    rank: str
    num: int
    price: int
    total: int


RANKS = ("S", "A", "B", "C")

LAYOUT = {
    "S": RankLayout(rank="S", total=50, offset=0, price=5000),
    "A": RankLayout(rank="A", total=150, offset=50, price=3000),
    "B": RankLayout(rank="B", total=300, offset=200, price=1000),
    "C": RankLayout(rank="C", total=500, offset=500, price=0),
}

TOTAL_SHEETS = sum(layout.total for layout in LAYOUT.values())


def validate_rank(rank: str) -> bool:
    return rank in LAYOUT


def _parse_num(num: Union[int, str]) -> Optional[int]:
    if isinstance(num, bool):
        return None
    if isinstance(num, int):
        return num
    if not isinstance(num, str):
        return None
    # Plain ASCII decimal with an optional sign; int() alone would also take
    # whitespace, underscores and non-ASCII digits
    digits = num[1:] if num.startswith(("+", "-")) else num
    if not (digits.isascii() and digits.isdigit()):
        return None
    return int(num, 10)


def get_sheet_info(rank: str, num: Union[int, str]) -> Optional[SheetInfo]:
    """Resolve a rank and a per-rank number (int or decimal string) to a sheet.

    Returns None when the rank is unknown, the number does not parse, or it
    falls outside 1..total for the rank.
    """
    layout = LAYOUT.get(rank)
    parsed = _parse_num(num)
    if layout is None or parsed is None:
        return None
    if not 0 < parsed <= layout.total:
        return None
    return SheetInfo(
        id=parsed + layout.offset,
        rank=layout.rank,
        num=parsed,
        price=layout.price,
        total=layout.total,
    )


def get_sheet_id(rank: str, num: Union[int, str]) -> Optional[int]:
    sheet = get_sheet_info(rank, num)
    return sheet.id if sheet else None


def get_sheet_by_id(sheet_id: int) -> Optional[SheetInfo]:
    """Inverse of get_sheet_id. None outside 1..TOTAL_SHEETS."""
    for rank in RANKS:
        layout = LAYOUT[rank]
        if layout.offset < sheet_id <= layout.offset + layout.total:
            return SheetInfo(
                id=sheet_id,
                rank=layout.rank,
                num=sheet_id - layout.offset,
                price=layout.price,
                total=layout.total,
            )
    return None


def iter_sheets():
    """Yield every sheet in ID order."""
    for sheet_id in range(1, TOTAL_SHEETS + 1):
        yield get_sheet_by_id(sheet_id)
