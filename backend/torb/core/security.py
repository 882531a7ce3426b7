"""
Session-based authentication.

The login state lives in Starlette's signed session cookie (configured in
torb.main with path=/, max_age=3600 and HttpOnly). Users and administrators
are tracked under independent keys, so one browser can hold both logins.

Routers resolve the current principal through the fillin_* dependencies,
which never fail, and protect endpoints with the *_login_required
dependencies, which answer 401 with the matching error code.
"""

import hashlib
import hmac
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from torb.db.session import get_db
from torb.models.user import Administrator, User

USER_ID_KEY = "user_id"
ADMINISTRATOR_ID_KEY = "administrator_id"


class NotLoggedIn(Exception):
    """The session carries no usable principal."""


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(password: str, pass_hash: str) -> bool:
    return hmac.compare_digest(hash_password(password), pass_hash or "")


def _session_id(request: Request, key: str) -> int:
    value = request.session.get(key)
    # JSON round-trips keep ints; anything else is a stale or forged value
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def sess_user_id(request: Request) -> int:
    return _session_id(request, USER_ID_KEY)


def sess_set_user_id(request: Request, user_id: int) -> None:
    request.session[USER_ID_KEY] = user_id


def sess_delete_user_id(request: Request) -> None:
    request.session.pop(USER_ID_KEY, None)


def sess_administrator_id(request: Request) -> int:
    return _session_id(request, ADMINISTRATOR_ID_KEY)


def sess_set_administrator_id(request: Request, administrator_id: int) -> None:
    request.session[ADMINISTRATOR_ID_KEY] = administrator_id


def sess_delete_administrator_id(request: Request) -> None:
    request.session.pop(ADMINISTRATOR_ID_KEY, None)


async def get_login_user(request: Request, db: AsyncSession) -> User:
    user_id = sess_user_id(request)
    if not user_id:
        raise NotLoggedIn("not logged in")
    user = await db.get(User, user_id)
    if user is None:
        raise NotLoggedIn(f"user {user_id} no longer exists")
    return user


async def get_login_administrator(request: Request, db: AsyncSession) -> Administrator:
    administrator_id = sess_administrator_id(request)
    if not administrator_id:
        raise NotLoggedIn("not logged in")
    administrator = await db.get(Administrator, administrator_id)
    if administrator is None:
        raise NotLoggedIn(f"administrator {administrator_id} no longer exists")
    return administrator


async def login_required(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    try:
        return await get_login_user(request, db)
    except NotLoggedIn:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="login_required",
        )


async def admin_login_required(
    request: Request, db: AsyncSession = Depends(get_db)
) -> Administrator:
    try:
        return await get_login_administrator(request, db)
    except NotLoggedIn:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="admin_login_required",
        )


async def fillin_user(request: Request, db: AsyncSession = Depends(get_db)) -> Optional[User]:
    """Attach the logged-in user (or None) to request.state.user."""
    try:
        user = await get_login_user(request, db)
    except NotLoggedIn:
        user = None
    request.state.user = user
    return user


async def fillin_administrator(
    request: Request, db: AsyncSession = Depends(get_db)
) -> Optional[Administrator]:
    """Attach the logged-in administrator (or None) to request.state.administrator."""
    try:
        administrator = await get_login_administrator(request, db)
    except NotLoggedIn:
        administrator = None
    request.state.administrator = administrator
    return administrator
