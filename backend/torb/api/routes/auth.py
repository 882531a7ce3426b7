"""
Login and logout for users and administrators.

Both principals live in the same signed session cookie under separate keys.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from torb.db.session import get_db
from torb.schemas.user import AdministratorResponse, LoginRequest, UserResponse
from torb.services.auth_service import authenticate_administrator, authenticate_user
from torb.core.security import (
    admin_login_required,
    fillin_administrator,
    fillin_user,
    login_required,
    sess_delete_administrator_id,
    sess_delete_user_id,
    sess_set_administrator_id,
    sess_set_user_id,
)

router = APIRouter(prefix="/api/actions", tags=["Authentication"], dependencies=[Depends(fillin_user)])
admin_router = APIRouter(
    prefix="/admin/api/actions",
    tags=["Admin Authentication"],
    dependencies=[Depends(fillin_administrator)],
)


@router.post("/login", response_model=UserResponse)
async def login(login_data: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, login_data)
    sess_set_user_id(request, user.id)
    return user


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(login_required)],
)
async def logout(request: Request):
    sess_delete_user_id(request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@admin_router.post("/login", response_model=AdministratorResponse)
async def admin_login(login_data: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    administrator = await authenticate_administrator(db, login_data)
    sess_set_administrator_id(request, administrator.id)
    return administrator


@admin_router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(admin_login_required)],
)
async def admin_logout(request: Request):
    sess_delete_administrator_id(request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
