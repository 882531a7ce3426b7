"""
Central router that aggregates all route modules.
"""

from fastapi import APIRouter
from torb.api.routes import admin, auth, events, users

api_router = APIRouter()
api_router.include_router(users.router)
api_router.include_router(auth.router)
api_router.include_router(events.router)
api_router.include_router(auth.admin_router)
api_router.include_router(admin.router)
