"""
User account endpoints: registration and the user's own page.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from torb.db.session import get_db
from torb.models.user import User
from torb.schemas.user import UserCreate, UserResponse
from torb.schemas.reservation import UserSummary
from torb.services.auth_service import register_user
from torb.services.reservation_service import get_user_summary
from torb.core.security import fillin_user, login_required

router = APIRouter(prefix="/api/users", tags=["Users"], dependencies=[Depends(fillin_user)])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user account."""
    return await register_user(db, user_data)


@router.get("/{user_id}", response_model=UserSummary, response_model_exclude_none=True)
async def show_user(
    user_id: int,
    user: User = Depends(login_required),
    db: AsyncSession = Depends(get_db),
):
    """Recent reservations, total spend and recent events of the logged-in user."""
    if user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="forbidden",
        )
    return await get_user_summary(db, user)
