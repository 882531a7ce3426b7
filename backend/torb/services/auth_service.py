"""
Account service handling user registration and login for both users and
administrators. Session bookkeeping happens in the routes.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from torb.models.user import Administrator, User
from torb.schemas.user import LoginRequest, UserCreate
from torb.core.security import hash_password, verify_password
from torb.core.metrics import record_login
from torb.core.logging import get_logger

logger = get_logger(__name__)


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Register a new user.
    Raises 409 if the login name is already taken.
    """
    result = await db.execute(select(User).where(User.login_name == user_data.login_name))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="login_name_exists", login_name=user_data.login_name)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="duplicated",
        )

    user = User(
        nickname=user_data.nickname,
        login_name=user_data.login_name,
        pass_hash=hash_password(user_data.password),
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, login_name=user.login_name)
    return user


async def authenticate_user(db: AsyncSession, login_data: LoginRequest) -> User:
    """Raises 401 if the login name is unknown or the password is wrong."""
    result = await db.execute(select(User).where(User.login_name == login_data.login_name))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.pass_hash):
        record_login("user", success=False)
        logger.warning("login_failed", login_name=login_data.login_name)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="authentication_failed",
        )

    record_login("user", success=True)
    logger.info("user_logged_in", user_id=user.id)
    return user


async def authenticate_administrator(db: AsyncSession, login_data: LoginRequest) -> Administrator:
    result = await db.execute(
        select(Administrator).where(Administrator.login_name == login_data.login_name)
    )
    administrator = result.scalar_one_or_none()

    if not administrator or not verify_password(login_data.password, administrator.pass_hash):
        record_login("administrator", success=False)
        logger.warning("admin_login_failed", login_name=login_data.login_name)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="authentication_failed",
        )

    record_login("administrator", success=True)
    logger.info("administrator_logged_in", administrator_id=administrator.id)
    return administrator
